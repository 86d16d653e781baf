"""Google Drive provider using the Drive API v3."""

import logging
from collections.abc import Iterable, Sequence
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx

from ..api_contracts import DriveFile, DriveFileListResponse, parse_google_error
from ..exceptions import (
    InvalidVideoURLError,
    ProviderError,
    UnsupportedMimeTypeError,
)
from ..models import SUPPORTED_MIME_TYPES, Service, Video, is_supported_mime_type
from .base import DEFAULT_TIMEOUT, BaseProvider, host_matches, parse_url

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/drive/v3"

FILE_FIELDS = "id,name,mimeType,thumbnailLink,videoMediaMetadata(durationMillis)"

QUOTA_REASONS = frozenset({"dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded"})


class GoogleDriveProvider(BaseProvider):
    """Provider for videos shared from Google Drive."""

    def __init__(
        self,
        api_key: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        supported_mime_types: Iterable[str] = SUPPORTED_MIME_TYPES,
        collection_max_items: int = 200,
    ):
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.supported_mime_types = frozenset(supported_mime_types)
        self.collection_max_items = collection_max_items

    @property
    def service_id(self) -> Service:
        return Service.GOOGLE_DRIVE

    def can_handle_link(self, url: str) -> bool:
        host, _ = parse_url(url)
        return host_matches(host, ("drive.google.com",))

    def is_collection_url(self, url: str) -> bool:
        _, path = parse_url(url)
        return "/folders/" in path

    def get_video_id(self, url: str) -> str:
        """Extract the file id from /file/d/ID/view or open?id=ID links."""
        parsed = urlparse(url)
        segments = [s for s in parsed.path.split("/") if s]

        if "d" in segments:
            index = segments.index("d")
            if index + 1 < len(segments):
                return segments[index + 1]

        file_id = parse_qs(parsed.query).get("id", [None])[0]
        if file_id:
            return file_id

        raise InvalidVideoURLError(f"Could not extract file ID from URL: {url}")

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

    def _api(self, path: str, params: dict[str, Any]) -> Any:
        if not self.api_key:
            raise ProviderError("Google Drive API key not configured (set GOOGLE_DRIVE_API_KEY)")
        return self._get_json(f"{API_BASE_URL}/{path}", {**params, "key": self.api_key})

    def _to_video(self, file: DriveFile, file_id: str | None = None) -> Video:
        return Video(
            service=Service.GOOGLE_DRIVE,
            id=file_id or file.id or "",
            title=file.name,
            thumbnail=file.thumbnailLink,
            length=file.length_seconds(),
            mime=file.mimeType,
        )

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        """Fetch file metadata.

        Raises:
            UnsupportedMimeTypeError: If the file is not a playable video
        """
        data = self._api(f"files/{video_id}", {"fields": FILE_FIELDS})
        file = self._validate(DriveFile, data)

        if file.mimeType and not is_supported_mime_type(file.mimeType, self.supported_mime_types):
            raise UnsupportedMimeTypeError(file.mimeType)

        return self._to_video(file, video_id)

    def resolve_url(self, url: str) -> list[Video]:
        """List playable videos in a shared folder."""
        _, path = parse_url(url)
        segments = [s for s in path.split("/") if s]
        if "folders" not in segments or segments.index("folders") + 1 >= len(segments):
            raise InvalidVideoURLError(f"Could not extract folder ID from URL: {url}")
        folder_id = segments[segments.index("folders") + 1]

        videos: list[Video] = []
        page_token: str | None = None
        while len(videos) < self.collection_max_items:
            params: dict[str, Any] = {
                "q": f"'{folder_id}' in parents and mimeType contains 'video/'",
                "fields": f"nextPageToken,files({FILE_FIELDS})",
                "pageSize": 100,
            }
            if page_token:
                params["pageToken"] = page_token

            page = self._validate(DriveFileListResponse, self._api("files", params))
            for file in page.files:
                if not file.id or not file.mimeType:
                    continue
                if not is_supported_mime_type(file.mimeType, self.supported_mime_types):
                    logger.debug(f"Skipping {file.id} in folder {folder_id}: {file.mimeType}")
                    continue
                videos.append(self._to_video(file))

            page_token = page.nextPageToken
            if not page_token:
                break

        logger.info(f"Resolved {len(videos)} videos from Google Drive folder {folder_id}")
        return videos[: self.collection_max_items]
