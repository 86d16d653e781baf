"""Data models for normalized video metadata."""

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, Field


class Service(str, Enum):
    """Identifiers of the supported video services."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    DAILYMOTION = "dailymotion"
    GOOGLE_DRIVE = "googledrive"
    DIRECT = "direct"


# Metadata attributes of a Video, in display order (identity fields excluded)
INFO_FIELDS: tuple[str, ...] = ("title", "description", "thumbnail", "length", "mime")

# Fields each service is expected to populate
SERVICE_FIELDS: dict[Service, tuple[str, ...]] = {
    Service.YOUTUBE: ("title", "description", "thumbnail", "length"),
    Service.VIMEO: ("title", "description", "thumbnail", "length"),
    Service.DAILYMOTION: ("title", "description", "thumbnail", "length"),
    Service.GOOGLE_DRIVE: ("title", "thumbnail", "length", "mime"),
    Service.DIRECT: ("title", "description", "mime"),
}

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    {"video/mp4", "video/webm", "video/ogg", "video/quicktime"}
)


class Video(BaseModel):
    """Normalized video metadata, keyed by (service, id).

    Every metadata field is optional: a record read from the cache or returned
    by a provider may be partial. A field counts as present when it is not None.
    """

    service: Service = Field(..., description="Service the video belongs to")
    id: str = Field(..., min_length=1, description="Service-scoped video id")
    title: str | None = Field(default=None, description="Video title")
    description: str | None = Field(default=None, description="Video description")
    thumbnail: str | None = Field(default=None, description="Thumbnail URL")
    length: int | None = Field(default=None, ge=0, description="Duration in seconds")
    mime: str | None = Field(default=None, description="Content mime type")

    @property
    def key(self) -> tuple[Service, str]:
        return self.service, self.id

    def present_fields(self) -> set[str]:
        """Return the metadata fields that hold a value."""
        return {name for name in INFO_FIELDS if getattr(self, name) is not None}

    def has_info(self) -> bool:
        """Check whether at least one metadata field is populated."""
        return bool(self.present_fields())

    def missing_fields(self, fields: Iterable[str]) -> list[str]:
        """Return the subset of ``fields`` not populated on this record, in order."""
        present = self.present_fields()
        return [name for name in fields if name not in present]

    @classmethod
    def merge(cls, older: "Video", newer: "Video") -> "Video":
        """Merge two records for the same key.

        Fields present on ``newer`` win; fields absent on ``newer`` fall back
        to ``older``.

        Raises:
            ValueError: If the records have different keys
        """
        if older.key != newer.key:
            raise ValueError(
                f"Cannot merge {older.service.value}:{older.id} "
                f"with {newer.service.value}:{newer.id}"
            )

        data = older.model_dump(exclude_none=True)
        data.update(newer.model_dump(exclude_none=True))
        return cls(**data)


def video_info_fields(service: Service | str) -> list[str]:
    """Get the metadata fields a service is expected to populate.

    Raises:
        ValueError: If the service is unknown
    """
    return list(SERVICE_FIELDS[Service(service)])


def is_supported_mime_type(mime: str, supported: Iterable[str] = SUPPORTED_MIME_TYPES) -> bool:
    """Check if a mime type is playable.

    Parameters like ``; codecs=...`` are ignored and matching is case-insensitive.
    """
    base = mime.split(";", 1)[0].strip().lower()
    return base in {m.lower() for m in supported}
