class IPCheckError(Exception):
    """Base class for every labeled failure raised by aws-ip-check."""

    kind = "error"


class InvalidInput(IPCheckError):
    kind = "invalid_input"


class CacheUnavailable(IPCheckError):
    """The cache file does not exist. Callers fall back to the remote source."""

    kind = "cache_unavailable"


class CacheUnreadable(IPCheckError):
    kind = "cache_unreadable"


class RemoteFetchFailed(IPCheckError):
    kind = "remote_fetch_failed"


class RangeParseSkipped(IPCheckError):
    """A single range entry had an unparseable CIDR. Recorded, never raised."""

    kind = "range_parse_skipped"

    def __init__(self, cidr: str, reason: str):
        super().__init__(f"skipping malformed CIDR [{cidr}]: {reason}")
        self.cidr = cidr
        self.reason = reason
