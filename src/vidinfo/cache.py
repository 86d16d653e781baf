"""Cache stores for normalized video metadata."""

import hashlib
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .models import Service, Video, video_info_fields

logger = logging.getLogger(__name__)


class VideoStore(ABC):
    """Key-value store of Video records keyed by (service, id).

    Upserts merge into the existing record field by field, so writing a
    partial record never erases fields that were already known.
    """

    @abstractmethod
    def get(self, service: Service | str, video_id: str) -> Video | None:
        """Return the cached record, or None if nothing is cached."""
        pass

    def get_video_info_fields(self, service: Service | str) -> list[str]:
        """Return the fields a complete record for ``service`` holds."""
        return video_info_fields(service)

    @abstractmethod
    def upsert_one(self, video: Video) -> None:
        """Create or update a single record."""
        pass

    def upsert_many(self, videos: Iterable[Video]) -> None:
        """Create or update several records."""
        for video in videos:
            self.upsert_one(video)


class MemoryVideoStore(VideoStore):
    """In-process store, mostly useful for tests and embedding."""

    def __init__(self) -> None:
        self._videos: dict[tuple[Service, str], Video] = {}

    def get(self, service: Service | str, video_id: str) -> Video | None:
        return self._videos.get((Service(service), video_id))

    def upsert_one(self, video: Video) -> None:
        existing = self._videos.get(video.key)
        self._videos[video.key] = Video.merge(existing, video) if existing else video

    def __len__(self) -> int:
        return len(self._videos)


class CachedVideo(BaseModel):
    """Cached video metadata with cache timestamp."""

    video: Video
    cached_at: datetime = Field(default_factory=datetime.now)


class FileVideoStore(VideoStore):
    """File-based store with one JSON document per video."""

    def __init__(self, cache_dir: Path, ttl_hours: int | None = None):
        """Initialize store.

        Args:
            cache_dir: Directory to store cache files
            ttl_hours: Time-to-live in hours; expired entries read as absent.
                None disables expiry.
        """
        self.cache_dir = cache_dir / "videos"
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours is not None else None
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_cache_path(self, service: Service, video_id: str) -> Path:
        """Get cache file path for a video.

        Ids are hashed since direct-link ids are whole URLs.
        """
        digest = hashlib.sha256(video_id.encode("utf-8")).hexdigest()[:32]
        return self.cache_dir / service.value / f"{digest}.json"

    def _load(self, cache_path: Path) -> CachedVideo | None:
        if not cache_path.exists():
            return None

        try:
            with cache_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return CachedVideo(**data)
        except (json.JSONDecodeError, ValidationError, KeyError) as e:
            logger.warning(f"Ignoring corrupted cache file {cache_path}: {e}")
            return None

    def _is_expired(self, cached: CachedVideo) -> bool:
        if self.ttl is None:
            return False
        return datetime.now() - cached.cached_at > self.ttl

    def get(self, service: Service | str, video_id: str) -> Video | None:
        """Retrieve a cached video if present and not expired."""
        service = Service(service)
        cached = self._load(self._get_cache_path(service, video_id))

        if cached is None or cached.video.id != video_id:
            return None

        if self._is_expired(cached):
            logger.debug(f"Cache entry expired for {service.value}:{video_id}")
            return None

        return cached.video

    def upsert_one(self, video: Video) -> None:
        """Merge a video into its cache file."""
        cache_path = self._get_cache_path(video.service, video.id)
        cache_path.parent.mkdir(parents=True, exist_ok=True)

        # Expired entries are replaced, never merged into
        existing = self._load(cache_path)
        if (
            existing is not None
            and existing.video.id == video.id
            and not self._is_expired(existing)
        ):
            video = Video.merge(existing.video, video)

        cached_video = CachedVideo(video=video)

        # Write to a temp file and swap so readers never see a partial document
        fd, tmp_name = tempfile.mkstemp(dir=cache_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(cached_video.model_dump(mode="json"), f, indent=2)
            os.replace(tmp_name, cache_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> int:
        """Clear all cached videos.

        Returns:
            Number of cache files removed
        """
        count = 0
        for cache_file in self.cache_dir.glob("*/*.json"):
            cache_file.unlink()
            count += 1
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        total = 0
        valid = 0
        expired = 0
        corrupted = 0
        by_service: dict[str, int] = {}

        for cache_file in self.cache_dir.glob("*/*.json"):
            total += 1
            cached = self._load(cache_file)
            if cached is None:
                corrupted += 1
                continue
            if self._is_expired(cached):
                expired += 1
                continue
            valid += 1
            service = cached.video.service.value
            by_service[service] = by_service.get(service, 0) + 1

        return {
            "total_files": total,
            "valid": valid,
            "expired": expired,
            "corrupted": corrupted,
            "by_service": by_service,
            "ttl_hours": self.ttl.total_seconds() / 3600 if self.ttl else None,
            "cache_dir": str(self.cache_dir),
        }
