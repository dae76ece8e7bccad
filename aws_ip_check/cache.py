import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
from pydantic import ValidationError

from aws_ip_check.errors import CacheUnavailable, CacheUnreadable, IPCheckError, RemoteFetchFailed
from aws_ip_check.fetcher import DEFAULT_URL, fetch_ip_ranges
from aws_ip_check.models import AddressRangeSet

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def read_cache_file(path: Path) -> tuple[bytes, datetime]:
    """Return the cached bytes and the file's modification time."""
    if not path.exists():
        raise CacheUnavailable(f"cache file does not exist [{path}]")
    if path.is_dir():
        raise CacheUnreadable(f"cache file path is a directory [{path}]")
    try:
        data = path.read_bytes()
        modified = datetime.fromtimestamp(path.stat().st_mtime, timezone.utc)
    except OSError as exc:
        raise CacheUnreadable(f"cannot read cache file [{path}]: {exc}") from exc
    # An interrupted write leaves an empty file behind
    if not data:
        raise CacheUnavailable(f"cache file is empty [{path}]")
    return data, modified


def write_cache_file(path: Path, data: bytes) -> None:
    if path.is_dir():
        raise CacheUnreadable(f"cache file path is a directory [{path}]")
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise CacheUnreadable(f"cannot write cache file [{path}]: {exc}") from exc
    logger.info("Wrote %d bytes to cache file %s", len(data), path)


class RangeStore:
    """Owns the current AddressRangeSet and decides when to reload it.

    The cache file is only consulted for the initial load, and with a TTL its
    modification time counts as the moment it was refreshed. Once the in-memory
    copy expires, the refresh goes straight to the remote source and the
    fetched bytes overwrite the cache file.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        cache_file_path: str | Path | None = None,
        ttl_seconds: int = 0,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self.url = url
        self.cache_file_path = Path(cache_file_path) if cache_file_path else None
        self.ttl_seconds = ttl_seconds
        self._transport = transport
        self._clock = clock
        self._ranges: AddressRangeSet | None = None
        self.last_refreshed: datetime | None = None

    @property
    def ranges(self) -> AddressRangeSet | None:
        return self._ranges

    def is_stale(self) -> bool:
        if self._ranges is None or self.last_refreshed is None:
            return True
        if self.ttl_seconds == 0:
            return False
        return self._expired(self.last_refreshed)

    def _expired(self, since: datetime) -> bool:
        return self._clock() >= since + timedelta(seconds=self.ttl_seconds)

    def ensure_fresh(self) -> AddressRangeSet:
        if self.is_stale():
            self.refresh()
        else:
            logger.debug("Range set still fresh (last refreshed %s)", self.last_refreshed)
        return self._ranges

    def refresh(self) -> AddressRangeSet:
        data = None
        source = None
        loaded_at = None
        if self.cache_file_path is not None and self._ranges is None:
            try:
                data, modified = read_cache_file(self.cache_file_path)
            except CacheUnavailable as exc:
                logger.info("%s, fetching from %s", exc, self.url)
            else:
                if self.ttl_seconds and self._expired(modified):
                    logger.info("Cache file %s is older than %ds, fetching from %s",
                                self.cache_file_path, self.ttl_seconds, self.url)
                    data = None
                else:
                    source = str(self.cache_file_path)
                    if self.ttl_seconds:
                        loaded_at = modified
                    logger.info("Loaded range data from cache file %s", self.cache_file_path)

        fetched = data is None
        if fetched:
            data = fetch_ip_ranges(self.url, transport=self._transport)
            source = self.url

        new_ranges = self._parse(data, source, fetched)

        if fetched and self.cache_file_path is not None:
            write_cache_file(self.cache_file_path, data)

        # Swap only after a full parse so readers never see a partial set
        self._ranges = new_ranges
        self.last_refreshed = loaded_at or self._clock()
        logger.info(
            "Range set refreshed: syncToken=%s, %d ranges",
            new_ranges.sync_token,
            len(new_ranges.ranges),
        )
        return new_ranges

    @staticmethod
    def _parse(data: bytes, source: str, fetched: bool) -> AddressRangeSet:
        try:
            return AddressRangeSet.from_bytes(data)
        except ValidationError as exc:
            error_cls: type[IPCheckError] = RemoteFetchFailed if fetched else CacheUnreadable
            raise error_cls(f"malformed range data from [{source}]: {exc}") from exc
