"""Direct video file provider (plain http(s) links to video files)."""

import logging
import mimetypes
from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

import requests

from ..exceptions import InvalidVideoURLError, ProviderFetchError, UnsupportedMimeTypeError
from ..models import SUPPORTED_MIME_TYPES, Service, Video, is_supported_mime_type
from ..utils.rate_limiter import RateLimiter
from .base import DEFAULT_TIMEOUT, BaseProvider

logger = logging.getLogger(__name__)

# Extensions we recognize as video files, including ones we can't play
VIDEO_EXTENSIONS = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".ogv": "video/ogg",
    ".ogg": "video/ogg",
    ".mov": "video/quicktime",
    ".qt": "video/quicktime",
    ".mkv": "video/x-matroska",
    ".flv": "video/x-flv",
    ".avi": "video/x-msvideo",
    ".wmv": "video/x-ms-wmv",
}

# Servers that reject HEAD itself (not the file) answer with these
HEAD_UNSUPPORTED_STATUSES = frozenset({405, 501})


class DirectVideoProvider(BaseProvider):
    """Provider for direct links to video files.

    Matches any http(s) URL whose path ends in a video extension, so it must
    rank after every host-specific provider. The video id is the URL itself.
    """

    priority = 100

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        supported_mime_types: Iterable[str] = SUPPORTED_MIME_TYPES,
        rate_limiter: RateLimiter | None = None,
    ):
        # HEAD requests go through requests, not the shared httpx client
        self.timeout = timeout
        self.supported_mime_types = frozenset(supported_mime_types)
        self.rate_limiter = rate_limiter or RateLimiter(delay=1.0)

    @property
    def service_id(self) -> Service:
        return Service.DIRECT

    def can_handle_link(self, url: str) -> bool:
        try:
            parsed = urlparse(url.strip())
        except ValueError:
            return False
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False
        return PurePosixPath(parsed.path).suffix.lower() in VIDEO_EXTENSIONS

    def get_video_id(self, url: str) -> str:
        if not self.can_handle_link(url):
            raise InvalidVideoURLError(f"Not a direct video link: {url}")
        return url.strip()

    def _guess_mime(self, url: str) -> str | None:
        suffix = PurePosixPath(urlparse(url).path).suffix.lower()
        if suffix in VIDEO_EXTENSIONS:
            return VIDEO_EXTENSIONS[suffix]
        guessed, _ = mimetypes.guess_type(url)
        return guessed

    def _head_mime(self, url: str) -> str | None:
        """Read the Content-Type the server reports for the file."""
        self.rate_limiter.wait(url)
        try:
            response = requests.head(url, allow_redirects=True, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code in HEAD_UNSUPPORTED_STATUSES:
                logger.debug(f"HEAD not allowed for {url}, guessing mime from extension")
                return None
            raise ProviderFetchError(
                self.service_id.value,
                f"Direct link returned {e.response.status_code}: {url}",
                status_code=e.response.status_code,
            ) from e
        except requests.RequestException as e:
            raise ProviderFetchError(
                self.service_id.value, f"Failed to reach direct link {url}: {e}"
            ) from e

        content_type = response.headers.get("content-type", "")
        mime = content_type.split(";", 1)[0].strip().lower()
        # Generic types say nothing about the file; trust the extension instead
        if not mime or mime in ("application/octet-stream", "binary/octet-stream"):
            return None
        return mime

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        """Build metadata from the link itself plus a HEAD request for the mime type.

        Raises:
            UnsupportedMimeTypeError: If the file is not a playable video
        """
        url = video_id
        mime = None
        if "mime" in fields:
            mime = self._head_mime(url) or self._guess_mime(url)
            if mime is None or not is_supported_mime_type(mime, self.supported_mime_types):
                raise UnsupportedMimeTypeError(mime or "unknown")

        filename = unquote(PurePosixPath(urlparse(url).path).name)
        return Video(
            service=Service.DIRECT,
            id=url,
            title=filename or url,
            description=f"Full Link: {url}",
            mime=mime,
        )
