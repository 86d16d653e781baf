"""Video metadata resolution with cache gap-filling and quota-aware fallback."""

import logging
from collections.abc import Iterable
from urllib.parse import urlparse

from .cache import VideoStore
from .exceptions import (
    OutOfQuotaError,
    ProviderError,
    UnresolvableReferenceError,
    UnsupportedMimeTypeError,
)
from .models import SUPPORTED_MIME_TYPES, Service, Video, is_supported_mime_type
from .providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def is_url(query: str) -> bool:
    """Check if the query parses as a URL with a host.

    Raises:
        UnresolvableReferenceError: If the query is a malformed URL
    """
    try:
        return bool(urlparse(query.strip()).netloc)
    except ValueError as e:
        raise UnresolvableReferenceError(f"Malformed URL: {query.strip()}") from e


class MetadataResolver:
    """Resolve a single (service, id) into a Video, filling cache gaps from providers."""

    def __init__(
        self,
        registry: ProviderRegistry,
        store: VideoStore,
        supported_mime_types: Iterable[str] = SUPPORTED_MIME_TYPES,
    ):
        self.registry = registry
        self.store = store
        self.supported_mime_types = frozenset(supported_mime_types)

    def _check_mime(self, video: Video) -> None:
        if video.mime is not None and not is_supported_mime_type(
            video.mime, self.supported_mime_types
        ):
            raise UnsupportedMimeTypeError(video.mime)

    def resolve(self, service: Service | str, video_id: str) -> Video:
        """Get video metadata, fetching only the fields the cache lacks.

        A record the cache already holds in full is returned without any
        provider call. When the provider is out of quota, a cached record with
        at least one populated field is returned as-is.

        Args:
            service: Service id
            video_id: Service-scoped video id

        Returns:
            Merged (or cached) Video

        Raises:
            UnresolvableReferenceError: If no provider is configured for the service
            UnsupportedMimeTypeError: If the cached or fetched mime type is not playable
            OutOfQuotaError: If out of quota and nothing usable is cached
            ProviderError: On any other provider failure
        """
        provider = self.registry.by_service_id(service)
        service = provider.service_id

        cached = self.store.get(service, video_id) or Video(service=service, id=video_id)
        self._check_mime(cached)

        missing = cached.missing_fields(self.store.get_video_info_fields(service))
        if not missing:
            logger.debug(f"Cache HIT for {service.value}:{video_id}")
            return cached

        logger.warning(f"MISSING INFO for {service.value}:{video_id}: {missing}")

        try:
            fetched = provider.fetch_video_info(video_id, missing)
        except OutOfQuotaError:
            logger.error(f"Failed to get video info for {service.value}:{video_id}: out of quota")
            if cached.has_info():
                logger.warning(f"Returning incomplete cached result for {service.value}:{video_id}")
                return cached
            raise
        except ProviderError as e:
            logger.error(f"Failed to get video info for {service.value}:{video_id}: {e}")
            raise

        video = Video.merge(cached, fetched)
        self._check_mime(video)

        self.store.upsert_one(video)
        return video


class QueryResolver:
    """Top-level entry point: resolve a URL or a search query into videos."""

    def __init__(self, registry: ProviderRegistry, metadata: MetadataResolver, store: VideoStore):
        self.registry = registry
        self.metadata = metadata
        self.store = store

    def resolve(self, query: str, search_service: Service | str) -> Video | list[Video]:
        """Resolve user input.

        Single-video URLs go through the MetadataResolver and return one Video.
        Collection URLs and searches return a list, and every result is
        upserted into the cache before returning.

        Raises:
            UnresolvableReferenceError: If no provider matches the URL or search service
            ProviderError: On provider failures
        """
        query = query.strip()

        if is_url(query):
            provider = self.registry.by_url(query)

            if not provider.is_collection_url(query):
                return self.metadata.resolve(provider.service_id, provider.get_video_id(query))

            logger.info(f"Resolving {provider.service_id.value} collection {query}")
            results = provider.resolve_url(query)
        else:
            provider = self.registry.by_service_id(search_service)
            logger.info(f"Searching {provider.service_id.value} for {query!r}")
            results = provider.search_videos(query)

        self.store.upsert_many(results)
        return results
