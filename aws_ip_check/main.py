"""Command-line entry point: ``aws-ip-check IP``.

Exit status is 0 when the address is inside a published AWS range, 1 when it
is not, and 2 on any error.
"""

import json
import logging
import sys

import click
from click.core import ParameterSource
from pydantic import ValidationError

from aws_ip_check.cache import RangeStore
from aws_ip_check.checker import CheckResult, MembershipChecker
from aws_ip_check.config import Settings
from aws_ip_check.errors import IPCheckError

logger = logging.getLogger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def _render_text(result: CheckResult, extra: bool) -> str:
    if not result.found:
        return f"IP {result.ip} not found in AWS ip ranges"
    details = ""
    if extra:
        details = "".join("," + json.dumps(m.to_dict()) for m in result.matches)
    return f"IP {result.ip} found in AWS ip range{details}"


def _render_json(result: CheckResult) -> str:
    return json.dumps({
        "ip": result.ip,
        "found": result.found,
        "matches": [m.to_dict() for m in result.matches],
    })


@click.command(name="aws-ip-check")
@click.argument("ip", required=False)
@click.option("--path", "cache_file_path", default=None, help="File path to store AWS ip-ranges.json.")
@click.option("--ttl", "cache_ttl_seconds", type=click.IntRange(min=0), default=None,
              help="Seconds before cached ranges are refetched. 0 never expires.")
@click.option("--url", "ip_range_url", default=None, help="Where to download ip-ranges.json from.")
@click.option("--extra/--no-extra", default=False, help="Print every AWS range the IP belongs to.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default=None)
def cli(ip, cache_file_path, cache_ttl_seconds, ip_range_url, extra, output_format):
    """Check whether IP belongs to the published AWS ip ranges."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise click.UsageError(f"invalid environment configuration: {exc}") from exc

    overrides = {
        "ip": ip,
        "cache_file_path": cache_file_path,
        "cache_ttl_seconds": cache_ttl_seconds,
        "ip_range_url": ip_range_url,
        "output_format": output_format,
    }
    # Flags always carry a value, so only an explicit --extra/--no-extra overrides the environment
    if click.get_current_context().get_parameter_source("extra") == ParameterSource.COMMANDLINE:
        overrides["extra"] = extra
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )

    if not settings.ip:
        raise click.UsageError("missing IP address (argument or AWS_IP_CHECK_IP)")

    store = RangeStore(
        url=settings.ip_range_url,
        cache_file_path=settings.cache_file_path or None,
        ttl_seconds=settings.cache_ttl_seconds,
    )
    checker = MembershipChecker(store)

    try:
        result = checker.check(settings.ip, exhaustive=settings.extra)
    except IPCheckError as exc:
        logger.debug("Check failed", exc_info=True)
        if settings.output_format == "json":
            click.echo(json.dumps({"ip": settings.ip, "error": str(exc), "kind": exc.kind}))
        else:
            click.echo(f"error: {exc}", err=True)
        sys.exit(EXIT_ERROR)

    if settings.output_format == "json":
        click.echo(_render_json(result))
    else:
        click.echo(_render_text(result, settings.extra))
    sys.exit(EXIT_FOUND if result.found else EXIT_NOT_FOUND)


if __name__ == "__main__":
    cli()
