import logging
from urllib.parse import urlparse

import httpx

from aws_ip_check.errors import RemoteFetchFailed

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://ip-ranges.amazonaws.com/ip-ranges.json"
TIMEOUT = httpx.Timeout(connect=10.0, read=60.0, write=10.0, pool=5.0)
MAX_RESPONSE_BYTES = 20 * 1024 * 1024  # 20 MB safety ceiling


def _validate_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise RemoteFetchFailed(f"unsupported URL scheme {parsed.scheme!r} [{url}]")
    if not parsed.hostname:
        raise RemoteFetchFailed(f"URL has no host [{url}]")
    return url


def fetch_ip_ranges(url: str, transport: httpx.BaseTransport | None = None) -> bytes:
    """Download the raw range document. Only a 200 response counts as success."""
    _validate_url(url)
    try:
        with httpx.Client(
            follow_redirects=True,
            timeout=TIMEOUT,
            max_redirects=3,
            transport=transport,
        ) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise RemoteFetchFailed(f"cannot reach [{url}]: {exc}") from exc

    if response.status_code != 200:
        raise RemoteFetchFailed(f"wrong server response from [{url}]")
    if len(response.content) > MAX_RESPONSE_BYTES:
        raise RemoteFetchFailed(f"response too large from [{url}]")
    logger.info("Fetched %d bytes from %s", len(response.content), url)
    return response.content
