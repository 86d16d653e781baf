"""YouTube provider using the YouTube Data API v3."""

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import isodate

from ..api_contracts import (
    YouTubeChannelListResponse,
    YouTubePlaylistItemsResponse,
    YouTubeSearchResponse,
    YouTubeVideoItem,
    YouTubeVideoListResponse,
    parse_google_error,
)
from ..exceptions import InvalidVideoURLError, ProviderError, ProviderFetchError
from ..models import Service, Video
from .base import DEFAULT_TIMEOUT, BaseProvider, host_matches, parse_url

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/youtube/v3"

YOUTUBE_DOMAINS = ("youtube.com", "youtu.be", "youtube-nocookie.com")

QUOTA_REASONS = frozenset(
    {"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded"}
)

SNIPPET_FIELDS = frozenset({"title", "description", "thumbnail"})

PLAYLIST_PAGE_SIZE = 50


def parse_duration(duration: str) -> int:
    """Convert an ISO 8601 duration (e.g. PT1H2M3S) to whole seconds.

    Raises:
        ValueError: If the duration cannot be parsed
    """
    try:
        return int(isodate.parse_duration(duration).total_seconds())
    except (isodate.ISO8601Error, TypeError) as e:
        raise ValueError(f"Invalid ISO 8601 duration: {duration!r}") from e


class YouTubeProvider(BaseProvider):
    """Provider for YouTube videos, playlists and channels."""

    def __init__(
        self,
        api_key: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        search_results_limit: int = 10,
        collection_max_items: int = 200,
    ):
        """Initialize with YouTube API key.

        Args:
            api_key: YouTube Data API v3 key; network operations fail without it
            client: HTTP client override
            timeout: Request timeout in seconds
            search_results_limit: Maximum number of search results
            collection_max_items: Maximum videos read from a playlist or channel
        """
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.search_results_limit = search_results_limit
        self.collection_max_items = collection_max_items

    @property
    def service_id(self) -> Service:
        return Service.YOUTUBE

    def can_handle_link(self, url: str) -> bool:
        """Check if source is a YouTube URL."""
        host, _ = parse_url(url)
        return host_matches(host, YOUTUBE_DOMAINS)

    def is_collection_url(self, url: str) -> bool:
        """Channels, users, handles and anything carrying a playlist are collections."""
        parsed = urlparse(url)
        path = parsed.path
        if path.startswith(("/channel/", "/user/", "/c/", "/@")):
            return True
        return "list" in parse_qs(parsed.query)

    def get_video_id(self, url: str) -> str:
        """Extract YouTube video ID from various URL formats.

        Supports:
        - https://www.youtube.com/watch?v=VIDEO_ID
        - https://youtu.be/VIDEO_ID
        - https://www.youtube.com/shorts/VIDEO_ID
        - https://www.youtube.com/embed/VIDEO_ID
        """
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()

        if host == "youtu.be" or host.endswith(".youtu.be"):
            video_id = parsed.path.strip("/").split("/")[0]
            if video_id:
                return video_id

        video_id = parse_qs(parsed.query).get("v", [None])[0]
        if video_id:
            return video_id

        segments = [s for s in parsed.path.split("/") if s]
        if len(segments) >= 2 and segments[0] in ("shorts", "embed", "v", "live"):
            return segments[1]

        raise InvalidVideoURLError(f"Could not extract video ID from URL: {url}")

    def _is_quota_error(self, response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        try:
            error = parse_google_error(response.json())
        except ValueError:
            return False
        return error is not None and bool(error.reasons() & QUOTA_REASONS)

    def _api(self, endpoint: str, params: dict[str, Any]) -> Any:
        if not self.api_key:
            raise ProviderError("YouTube API key not configured (set YOUTUBE_API_KEY)")
        return self._get_json(f"{API_BASE_URL}/{endpoint}", {**params, "key": self.api_key})

    def _parts_for(self, fields: Sequence[str]) -> list[str]:
        """Pick the cheapest set of API parts that covers the requested fields."""
        parts = []
        if SNIPPET_FIELDS & set(fields):
            parts.append("snippet")
        if "length" in fields:
            parts.append("contentDetails")
        return parts or ["snippet"]

    def _to_video(self, item: YouTubeVideoItem) -> Video:
        data: dict[str, Any] = {"service": Service.YOUTUBE, "id": item.id}
        if item.snippet is not None:
            data["title"] = item.snippet.title
            data["description"] = item.snippet.description
            data["thumbnail"] = item.snippet.best_thumbnail()
        if item.contentDetails is not None and item.contentDetails.duration:
            try:
                data["length"] = parse_duration(item.contentDetails.duration)
            except ValueError as e:
                raise ProviderFetchError(self.service_id.value, str(e)) from e
        return Video(**data)

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        """Fetch video metadata, requesting only the API parts the fields need."""
        parts = self._parts_for(fields)
        logger.debug(f"Fetching YouTube parts {parts} for {video_id}")

        data = self._api("videos", {"part": ",".join(parts), "id": video_id})
        response = self._validate(YouTubeVideoListResponse, data)

        if not response.items:
            raise ProviderFetchError(
                self.service_id.value, f"Video {video_id} not found", status_code=404
            )
        return self._to_video(response.items[0])

    def resolve_url(self, url: str) -> list[Video]:
        """Resolve a playlist, channel, user or handle URL into its videos."""
        parsed = urlparse(url)
        playlist_id = parse_qs(parsed.query).get("list", [None])[0]

        if playlist_id is None:
            playlist_id = self._get_uploads_playlist(parsed.path)

        return self._get_playlist_videos(playlist_id)

    def _get_uploads_playlist(self, path: str) -> str:
        segments = [s for s in path.split("/") if s]
        if not segments:
            raise InvalidVideoURLError(f"Not a channel URL: {path}")

        params: dict[str, Any] = {"part": "contentDetails"}
        if segments[0].startswith("@"):
            params["forHandle"] = segments[0]
        elif segments[0] == "channel" and len(segments) > 1:
            params["id"] = segments[1]
        elif segments[0] == "user" and len(segments) > 1:
            params["forUsername"] = segments[1]
        elif segments[0] == "c" and len(segments) > 1:
            # Legacy custom URLs usually match the channel handle
            params["forHandle"] = "@" + segments[1]
        else:
            raise InvalidVideoURLError(f"Not a channel URL: {path}")

        response = self._validate(YouTubeChannelListResponse, self._api("channels", params))
        for item in response.items:
            if item.contentDetails and item.contentDetails.relatedPlaylists.uploads:
                return item.contentDetails.relatedPlaylists.uploads

        raise ProviderFetchError(
            self.service_id.value, f"Channel not found for {path}", status_code=404
        )

    def _get_playlist_videos(self, playlist_id: str) -> list[Video]:
        videos: list[Video] = []
        page_token: str | None = None

        while len(videos) < self.collection_max_items:
            params: dict[str, Any] = {
                "part": "snippet",
                "playlistId": playlist_id,
                "maxResults": PLAYLIST_PAGE_SIZE,
            }
            if page_token:
                params["pageToken"] = page_token

            page = self._validate(YouTubePlaylistItemsResponse, self._api("playlistItems", params))
            for item in page.items:
                resource = item.snippet.resourceId
                if resource is None or not resource.videoId:
                    continue
                videos.append(
                    Video(
                        service=Service.YOUTUBE,
                        id=resource.videoId,
                        title=item.snippet.title,
                        description=item.snippet.description,
                        thumbnail=item.snippet.best_thumbnail(),
                    )
                )

            page_token = page.nextPageToken
            if not page_token:
                break

        logger.info(f"Resolved {len(videos)} videos from YouTube playlist {playlist_id}")
        return videos[: self.collection_max_items]

    def search_videos(self, query: str) -> list[Video]:
        """Search YouTube videos by free text (costs 100 quota units)."""
        data = self._api(
            "search",
            {
                "part": "snippet",
                "type": "video",
                "q": query,
                "maxResults": self.search_results_limit,
            },
        )
        response = self._validate(YouTubeSearchResponse, data)

        results = []
        for item in response.items:
            if not item.id.videoId:
                continue
            snippet = item.snippet
            results.append(
                Video(
                    service=Service.YOUTUBE,
                    id=item.id.videoId,
                    title=snippet.title if snippet else None,
                    description=snippet.description if snippet else None,
                    thumbnail=snippet.best_thumbnail() if snippet else None,
                )
            )
        return results
