"""Per-host pacing for requests to arbitrary file servers."""

import time
from urllib.parse import urlparse


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


class RateLimiter:
    """Space out requests to the same host by at least ``delay`` seconds.

    Hosts are compared case-insensitively and without port or credentials.
    A ``delay`` of zero or less disables pacing.
    """

    def __init__(self, delay: float = 1.0) -> None:
        self.delay = delay
        self._next_allowed: dict[str, float] = {}

    def wait(self, url: str) -> None:
        """Sleep until the URL's host may be contacted again, then reserve the next slot."""
        host = _host(url)
        if not host or self.delay <= 0:
            return

        now = time.monotonic()
        pause = self._next_allowed.get(host, now) - now
        if pause > 0:
            time.sleep(pause)
        else:
            pause = 0.0

        self._next_allowed[host] = now + pause + self.delay
