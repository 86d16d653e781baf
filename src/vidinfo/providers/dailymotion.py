"""Dailymotion provider using the public REST API."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..api_contracts import DailymotionListResponse, DailymotionVideo
from ..exceptions import InvalidVideoURLError
from ..models import Service, Video
from .base import DEFAULT_TIMEOUT, BaseProvider, host_matches, parse_url

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.dailymotion.com"

# Video field -> Dailymotion API field
FIELD_MAP = {
    "title": "title",
    "description": "description",
    "thumbnail": "thumbnail_url",
    "length": "duration",
}

PAGE_SIZE = 100


def _to_video(item: DailymotionVideo, video_id: str | None = None) -> Video:
    return Video(
        service=Service.DAILYMOTION,
        id=video_id or item.id or "",
        title=item.title,
        description=item.description,
        thumbnail=item.thumbnail_url,
        length=item.duration,
    )


class DailymotionProvider(BaseProvider):
    """Provider for Dailymotion videos and playlists."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        search_results_limit: int = 10,
        collection_max_items: int = 200,
    ):
        super().__init__(client=client, timeout=timeout)
        self.search_results_limit = search_results_limit
        self.collection_max_items = collection_max_items

    @property
    def service_id(self) -> Service:
        return Service.DAILYMOTION

    def can_handle_link(self, url: str) -> bool:
        host, _ = parse_url(url)
        return host_matches(host, ("dailymotion.com", "dai.ly"))

    def is_collection_url(self, url: str) -> bool:
        _, path = parse_url(url)
        return path.startswith("/playlist/")

    def get_video_id(self, url: str) -> str:
        """Extract the id from dailymotion.com/video/ID or dai.ly/ID.

        Dailymotion slugs look like ``x8abc12_some-title``; only the part
        before the underscore is the id.
        """
        host, path = parse_url(url)
        segments = [s for s in path.split("/") if s]

        if host_matches(host, ("dai.ly",)) and segments:
            return segments[0]

        if len(segments) >= 2 and segments[0] in ("video", "embed"):
            if segments[0] == "embed" and segments[1] == "video" and len(segments) >= 3:
                return segments[2].split("_")[0]
            return segments[1].split("_")[0]

        raise InvalidVideoURLError(f"Could not extract video ID from URL: {url}")

    def _api_fields(self, fields: Sequence[str]) -> str:
        api_fields = [FIELD_MAP[f] for f in fields if f in FIELD_MAP]
        return ",".join(api_fields or FIELD_MAP.values())

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        data = self._get_json(
            f"{API_BASE_URL}/video/{video_id}", {"fields": self._api_fields(fields)}
        )
        return _to_video(self._validate(DailymotionVideo, data), video_id)

    def _list(self, url: str, params: dict[str, Any], max_items: int) -> list[Video]:
        videos: list[Video] = []
        page = 1
        list_fields = "id," + ",".join(FIELD_MAP.values())

        while len(videos) < max_items:
            data = self._get_json(
                url,
                {**params, "fields": list_fields, "limit": min(PAGE_SIZE, max_items), "page": page},
            )
            response = self._validate(DailymotionListResponse, data)
            videos.extend(_to_video(item) for item in response.videos if item.id)

            if not response.has_more:
                break
            page += 1

        return videos[:max_items]

    def resolve_url(self, url: str) -> list[Video]:
        _, path = parse_url(url)
        segments = [s for s in path.split("/") if s]
        if len(segments) < 2:
            raise InvalidVideoURLError(f"Could not extract playlist ID from URL: {url}")

        playlist_id = segments[1]
        videos = self._list(
            f"{API_BASE_URL}/playlist/{playlist_id}/videos", {}, self.collection_max_items
        )
        logger.info(f"Resolved {len(videos)} videos from Dailymotion playlist {playlist_id}")
        return videos

    def search_videos(self, query: str) -> list[Video]:
        return self._list(
            f"{API_BASE_URL}/videos", {"search": query}, self.search_results_limit
        )
