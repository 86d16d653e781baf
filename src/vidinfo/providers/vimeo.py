"""Vimeo provider using the public oEmbed endpoint."""

from collections.abc import Sequence
from urllib.parse import urlparse

from ..api_contracts import VimeoOEmbedResponse
from ..exceptions import InvalidVideoURLError
from ..models import Service, Video
from .base import BaseProvider, host_matches, parse_url

OEMBED_URL = "https://vimeo.com/api/oembed.json"


class VimeoProvider(BaseProvider):
    """Provider for Vimeo videos.

    oEmbed returns every field in one call, so the requested field subset
    does not change the request.
    """

    @property
    def service_id(self) -> Service:
        return Service.VIMEO

    def can_handle_link(self, url: str) -> bool:
        host, _ = parse_url(url)
        return host_matches(host, ("vimeo.com",))

    def get_video_id(self, url: str) -> str:
        """Return the numeric id from vimeo.com/ID, player.vimeo.com/video/ID or
        channel/group paths ending in the id."""
        segments = [s for s in urlparse(url).path.split("/") if s]
        for segment in segments:
            if segment.isdigit():
                return segment
        raise InvalidVideoURLError(f"Could not extract video ID from URL: {url}")

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        data = self._get_json(OEMBED_URL, {"url": f"https://vimeo.com/{video_id}"})
        oembed = self._validate(VimeoOEmbedResponse, data)

        return Video(
            service=Service.VIMEO,
            id=video_id,
            title=oembed.title,
            description=oembed.description,
            thumbnail=oembed.thumbnail_url,
            length=oembed.duration,
        )
