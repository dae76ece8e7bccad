import ipaddress
import logging
from dataclasses import dataclass, field

from aws_ip_check.cache import RangeStore
from aws_ip_check.errors import InvalidInput, RangeParseSkipped
from aws_ip_check.models import AddressRange

logger = logging.getLogger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class CheckResult:
    ip: str
    found: bool
    range: AddressRange | None = None
    matches: tuple[AddressRange, ...] = ()
    skipped: tuple[RangeParseSkipped, ...] = field(default=(), compare=False)


def parse_ip(text: str) -> IPAddress:
    try:
        address = ipaddress.ip_address(text.strip())
    except (ValueError, AttributeError) as exc:
        raise InvalidInput(f"malformed IP provided [{text}]") from exc
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


class MembershipChecker:
    def __init__(self, store: RangeStore):
        self.store = store

    def check(self, ip: str, exhaustive: bool = False) -> CheckResult:
        """Report whether ``ip`` falls in any published range.

        The first match in document order is returned as ``range``. With
        ``exhaustive`` every match is collected in ``matches``; otherwise the
        scan stops at the first one. Entries whose CIDR does not parse are
        logged and listed in ``skipped``.
        """
        address = parse_ip(ip)
        range_set = self.store.ensure_fresh()

        matches: list[AddressRange] = []
        skipped: list[RangeParseSkipped] = []
        for entry in range_set.ranges:
            try:
                network = ipaddress.ip_network(entry.cidr, strict=False)
            except ValueError as exc:
                skip = RangeParseSkipped(entry.cidr, str(exc))
                logger.warning("%s", skip)
                skipped.append(skip)
                continue
            if network.version == address.version and address in network:
                matches.append(entry)
                if not exhaustive:
                    break

        return CheckResult(
            ip=ip.strip(),
            found=bool(matches),
            range=matches[0] if matches else None,
            matches=tuple(matches),
            skipped=tuple(skipped),
        )
