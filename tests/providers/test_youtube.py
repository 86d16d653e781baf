"""Tests for the YouTube provider."""

import httpx
import pytest
from conftest import json_response

from vidinfo.exceptions import (
    InvalidVideoURLError,
    OutOfQuotaError,
    ProviderError,
    ProviderFetchError,
)
from vidinfo.models import Service
from vidinfo.providers.youtube import YouTubeProvider, parse_duration

VIDEO_ITEM = {
    "id": "dQw4w9WgXcQ",
    "snippet": {
        "title": "Never Gonna Give You Up",
        "description": "The official video",
        "channelTitle": "Rick Astley",
        "thumbnails": {
            "default": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg"},
            "medium": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/mqdefault.jpg"},
        },
    },
    "contentDetails": {"duration": "PT3M33S"},
}


def quota_error(reason: str = "quotaExceeded") -> httpx.Response:
    return json_response(
        {"error": {"code": 403, "message": "quota", "errors": [{"reason": reason}]}},
        status_code=403,
    )


@pytest.fixture
def provider() -> YouTubeProvider:
    return YouTubeProvider(api_key="test-key")


class TestYouTubeURLs:
    """Tests for YouTube URL recognition and id extraction."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_extract_video_id(self, provider: YouTubeProvider, url: str) -> None:
        assert provider.can_handle_link(url)
        assert not provider.is_collection_url(url)
        assert provider.get_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/playlist?list=PL123",
            "https://www.youtube.com/watch?v=abc&list=PL123",
            "https://www.youtube.com/channel/UC123",
            "https://www.youtube.com/user/someone",
            "https://www.youtube.com/@handle",
        ],
    )
    def test_collection_urls(self, provider: YouTubeProvider, url: str) -> None:
        assert provider.is_collection_url(url)

    def test_rejects_other_hosts(self, provider: YouTubeProvider) -> None:
        assert not provider.can_handle_link("https://notyoutube.com/watch?v=abc")
        assert not provider.can_handle_link("https://vimeo.com/123")

    def test_missing_video_id_raises_error(self, provider: YouTubeProvider) -> None:
        with pytest.raises(InvalidVideoURLError):
            provider.get_video_id("https://www.youtube.com/watch")


class TestParseDuration:
    """Tests for ISO 8601 duration parsing."""

    @pytest.mark.parametrize(
        ("duration", "seconds"),
        [("PT3M33S", 213), ("PT1H2M3S", 3723), ("PT45S", 45), ("P1DT1S", 86401), ("PT0S", 0)],
    )
    def test_valid(self, duration: str, seconds: int) -> None:
        assert parse_duration(duration) == seconds

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_duration("three minutes")


class TestYouTubeFetch:
    """Tests for fetch_video_info."""

    def test_fetch_all_fields(self, mock_client) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return json_response({"items": [VIDEO_ITEM]})

        provider = YouTubeProvider(api_key="test-key", client=mock_client(handler))
        video = provider.fetch_video_info(
            "dQw4w9WgXcQ", ["title", "description", "thumbnail", "length"]
        )

        assert video.service is Service.YOUTUBE
        assert video.title == "Never Gonna Give You Up"
        assert video.thumbnail == "https://i.ytimg.com/vi/dQw4w9WgXcQ/mqdefault.jpg"
        assert video.length == 213
        assert requests[0].url.path == "/youtube/v3/videos"
        assert requests[0].url.params["part"] == "snippet,contentDetails"
        assert requests[0].url.params["key"] == "test-key"

    def test_length_only_requests_content_details(self, mock_client) -> None:
        """Test fetching only the duration skips the snippet part."""
        parts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            parts.append(request.url.params["part"])
            return json_response(
                {"items": [{"id": "abc", "contentDetails": {"duration": "PT10S"}}]}
            )

        provider = YouTubeProvider(api_key="k", client=mock_client(handler))
        video = provider.fetch_video_info("abc", ["length"])

        assert parts == ["contentDetails"]
        assert video.length == 10
        assert video.title is None

    def test_snippet_only_for_text_fields(self, mock_client) -> None:
        parts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            parts.append(request.url.params["part"])
            return json_response({"items": [{"id": "abc", "snippet": VIDEO_ITEM["snippet"]}]})

        provider = YouTubeProvider(api_key="k", client=mock_client(handler))
        provider.fetch_video_info("abc", ["title"])

        assert parts == ["snippet"]

    def test_not_found(self, mock_client) -> None:
        provider = YouTubeProvider(
            api_key="k", client=mock_client(lambda r: json_response({"items": []}))
        )
        with pytest.raises(ProviderFetchError, match="not found") as exc_info:
            provider.fetch_video_info("missing", ["title"])
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("reason", ["quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded"])
    def test_quota_exceeded(self, mock_client, reason: str) -> None:
        provider = YouTubeProvider(api_key="k", client=mock_client(lambda r: quota_error(reason)))
        with pytest.raises(OutOfQuotaError) as exc_info:
            provider.fetch_video_info("abc", ["title"])
        assert exc_info.value.service == "youtube"

    def test_forbidden_without_quota_reason_is_fetch_error(self, mock_client) -> None:
        provider = YouTubeProvider(
            api_key="k", client=mock_client(lambda r: quota_error("forbidden"))
        )
        with pytest.raises(ProviderFetchError) as exc_info:
            provider.fetch_video_info("abc", ["title"])
        assert exc_info.value.status_code == 403

    def test_missing_api_key(self, mock_client) -> None:
        provider = YouTubeProvider(client=mock_client(lambda r: json_response({})))
        with pytest.raises(ProviderError, match="API key not configured"):
            provider.fetch_video_info("abc", ["title"])


class TestYouTubeCollections:
    """Tests for resolve_url and search_videos."""

    def test_playlist_pagination(self, mock_client) -> None:
        def item(video_id: str) -> dict:
            return {
                "snippet": {
                    "title": f"Video {video_id}",
                    "resourceId": {"kind": "youtube#video", "videoId": video_id},
                }
            }

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/youtube/v3/playlistItems"
            assert request.url.params["playlistId"] == "PL123"
            if request.url.params.get("pageToken") == "page2":
                return json_response({"items": [item("c")]})
            return json_response({"items": [item("a"), item("b")], "nextPageToken": "page2"})

        provider = YouTubeProvider(api_key="k", client=mock_client(handler))
        videos = provider.resolve_url("https://www.youtube.com/playlist?list=PL123")

        assert [v.id for v in videos] == ["a", "b", "c"]
        assert videos[0].title == "Video a"

    def test_playlist_respects_max_items(self, mock_client) -> None:
        page = {
            "items": [
                {"snippet": {"resourceId": {"videoId": f"v{i}"}}} for i in range(50)
            ],
            "nextPageToken": "more",
        }
        provider = YouTubeProvider(
            api_key="k", client=mock_client(lambda r: json_response(page)), collection_max_items=60
        )

        videos = provider.resolve_url("https://www.youtube.com/playlist?list=PL1")

        assert len(videos) == 60

    def test_channel_uses_uploads_playlist(self, mock_client) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path.endswith("/channels"):
                assert request.url.params["id"] == "UC123"
                return json_response(
                    {
                        "items": [
                            {
                                "id": "UC123",
                                "contentDetails": {"relatedPlaylists": {"uploads": "UU123"}},
                            }
                        ]
                    }
                )
            assert request.url.params["playlistId"] == "UU123"
            return json_response({"items": [{"snippet": {"resourceId": {"videoId": "x"}}}]})

        provider = YouTubeProvider(api_key="k", client=mock_client(handler))
        videos = provider.resolve_url("https://www.youtube.com/channel/UC123")

        assert [v.id for v in videos] == ["x"]
        assert seen == ["/youtube/v3/channels", "/youtube/v3/playlistItems"]

    def test_handle_lookup(self, mock_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/channels"):
                assert request.url.params["forHandle"] == "@someone"
                return json_response({"items": []})
            raise AssertionError("playlist should not be fetched")

        provider = YouTubeProvider(api_key="k", client=mock_client(handler))
        with pytest.raises(ProviderFetchError, match="Channel not found"):
            provider.resolve_url("https://www.youtube.com/@someone")

    def test_search(self, mock_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/youtube/v3/search"
            assert request.url.params["q"] == "rick astley"
            assert request.url.params["type"] == "video"
            assert request.url.params["maxResults"] == "5"
            return json_response(
                {
                    "items": [
                        {"id": {"kind": "youtube#video", "videoId": "v1"}, "snippet": {"title": "One"}},
                        {"id": {"kind": "youtube#channel"}, "snippet": {"title": "Channel"}},
                    ]
                }
            )

        provider = YouTubeProvider(
            api_key="k", client=mock_client(handler), search_results_limit=5
        )
        results = provider.search_videos("rick astley")

        assert [v.id for v in results] == ["v1"]
        assert results[0].title == "One"
        assert results[0].length is None
