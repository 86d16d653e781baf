"""API contract validation schemas for external video services.

These schemas validate that provider responses match our expectations,
helping catch breaking changes in third-party services.
"""

from typing import Any

from pydantic import BaseModel, Field

# Google API error envelope (shared by YouTube Data API and Google Drive API)


class GoogleErrorDetail(BaseModel):
    """Single entry of a Google API error's ``errors`` list."""

    reason: str | None = None
    message: str | None = None
    domain: str | None = None


class GoogleError(BaseModel):
    """Google API error body."""

    code: int | None = None
    message: str | None = None
    errors: list[GoogleErrorDetail] = Field(default_factory=list)


class GoogleErrorResponse(BaseModel):
    """Google API error response schema."""

    error: GoogleError

    def reasons(self) -> set[str]:
        return {e.reason for e in self.error.errors if e.reason}


# YouTube Data API Contracts


class YouTubeThumbnail(BaseModel):
    """Single thumbnail rendition."""

    url: str
    width: int | None = None
    height: int | None = None


class YouTubeSnippet(BaseModel):
    """YouTube resource snippet (videos, search results, playlist items)."""

    title: str | None = None
    description: str | None = None
    channelTitle: str | None = None
    thumbnails: dict[str, YouTubeThumbnail] = Field(default_factory=dict)

    def best_thumbnail(self) -> str | None:
        """Return the URL of the best available thumbnail."""
        for quality in ("medium", "high", "standard", "default", "maxres"):
            if quality in self.thumbnails:
                return self.thumbnails[quality].url
        return None


class YouTubeContentDetails(BaseModel):
    """YouTube video contentDetails part."""

    duration: str | None = None


class YouTubeVideoItem(BaseModel):
    """YouTube video item from videos.list."""

    id: str
    snippet: YouTubeSnippet | None = None
    contentDetails: YouTubeContentDetails | None = None


class YouTubeVideoListResponse(BaseModel):
    """YouTube Data API videos.list response."""

    items: list[YouTubeVideoItem] = Field(default_factory=list)


class YouTubeSearchId(BaseModel):
    """Resource id of a search result."""

    kind: str | None = None
    videoId: str | None = None


class YouTubeSearchItem(BaseModel):
    """YouTube search.list item."""

    id: YouTubeSearchId
    snippet: YouTubeSnippet | None = None


class YouTubeSearchResponse(BaseModel):
    """YouTube Data API search.list response."""

    items: list[YouTubeSearchItem] = Field(default_factory=list)


class YouTubeResourceId(BaseModel):
    """Resource referenced by a playlist item."""

    kind: str | None = None
    videoId: str | None = None


class YouTubePlaylistItemSnippet(YouTubeSnippet):
    """Snippet of a playlistItems.list entry."""

    resourceId: YouTubeResourceId | None = None


class YouTubePlaylistItem(BaseModel):
    """YouTube playlistItems.list item."""

    snippet: YouTubePlaylistItemSnippet


class YouTubePlaylistItemsResponse(BaseModel):
    """YouTube Data API playlistItems.list response."""

    items: list[YouTubePlaylistItem] = Field(default_factory=list)
    nextPageToken: str | None = None


class YouTubeRelatedPlaylists(BaseModel):
    """Playlists related to a channel."""

    uploads: str | None = None


class YouTubeChannelContentDetails(BaseModel):
    """Channel contentDetails part."""

    relatedPlaylists: YouTubeRelatedPlaylists


class YouTubeChannelItem(BaseModel):
    """YouTube channels.list item."""

    id: str
    contentDetails: YouTubeChannelContentDetails | None = None


class YouTubeChannelListResponse(BaseModel):
    """YouTube Data API channels.list response."""

    items: list[YouTubeChannelItem] = Field(default_factory=list)


# Vimeo oEmbed Contracts


class VimeoOEmbedResponse(BaseModel):
    """Vimeo oEmbed response."""

    video_id: int | None = None
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    duration: int | None = None


# Dailymotion API Contracts


class DailymotionVideo(BaseModel):
    """Dailymotion video object (only the requested fields are returned)."""

    id: str | None = None
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    duration: int | None = None


class DailymotionListResponse(BaseModel):
    """Dailymotion paginated list response."""

    videos: list[DailymotionVideo] = Field(default_factory=list, alias="list")
    has_more: bool = False
    page: int = 1


# Google Drive API Contracts


class DriveVideoMediaMetadata(BaseModel):
    """Video metadata attached to a Drive file."""

    durationMillis: str | int | None = None


class DriveFile(BaseModel):
    """Google Drive files.get / files.list entry."""

    id: str | None = None
    name: str | None = None
    mimeType: str | None = None
    thumbnailLink: str | None = None
    videoMediaMetadata: DriveVideoMediaMetadata | None = None

    def length_seconds(self) -> int | None:
        if self.videoMediaMetadata is None or self.videoMediaMetadata.durationMillis is None:
            return None
        return int(self.videoMediaMetadata.durationMillis) // 1000


class DriveFileListResponse(BaseModel):
    """Google Drive files.list response."""

    files: list[DriveFile] = Field(default_factory=list)
    nextPageToken: str | None = None


def parse_google_error(response_data: Any) -> GoogleErrorResponse | None:
    """Parse a Google API error body, returning None if it doesn't match the contract."""
    if not isinstance(response_data, dict) or "error" not in response_data:
        return None
    try:
        return GoogleErrorResponse(**response_data)
    except (TypeError, ValueError):
        return None
