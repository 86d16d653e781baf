"""Registry for selecting video providers by service id or URL."""

import logging
from collections.abc import Iterable

import httpx

from ..config import Settings
from ..exceptions import UnresolvableReferenceError
from ..models import Service
from .base import BaseProvider
from .dailymotion import DailymotionProvider
from .direct import DirectVideoProvider
from .googledrive import GoogleDriveProvider
from .vimeo import VimeoProvider
from .youtube import YouTubeProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Priority-ordered collection of providers.

    URL routing is first-match-wins over providers sorted by ``priority``
    (lower first). Providers with equal priority keep their configured order.
    Host-specific providers must either have mutually exclusive patterns or
    rank ahead of broader matchers; overlaps are logged at debug level.
    """

    def __init__(self, providers: Iterable[BaseProvider]):
        """Initialize registry.

        Raises:
            ValueError: If two providers share a service id
        """
        ordered = sorted(providers, key=lambda p: p.priority)

        seen: set[Service] = set()
        for provider in ordered:
            if provider.service_id in seen:
                raise ValueError(f"Duplicate provider for service: {provider.service_id.value}")
            seen.add(provider.service_id)

        self._providers = ordered

    @property
    def providers(self) -> list[BaseProvider]:
        return list(self._providers)

    def by_service_id(self, service: Service | str) -> BaseProvider:
        """Get the provider for a service id.

        Raises:
            UnresolvableReferenceError: If no provider is configured for the service
        """
        for provider in self._providers:
            if provider.service_id.value == getattr(service, "value", service):
                return provider

        raise UnresolvableReferenceError(f"No provider configured for service: {service}")

    def by_url(self, url: str) -> BaseProvider:
        """Get the highest-priority provider that recognizes the URL.

        Raises:
            UnresolvableReferenceError: If no provider can handle the URL
        """
        matches = [p for p in self._providers if p.can_handle_link(url)]

        if not matches:
            raise UnresolvableReferenceError(f"No provider found for URL: {url}")

        if len(matches) > 1:
            shadowed = ", ".join(p.service_id.value for p in matches[1:])
            logger.debug(f"{matches[0].service_id.value} shadows {shadowed} for {url}")

        return matches[0]


def build_registry(settings: Settings, client: httpx.Client | None = None) -> ProviderRegistry:
    """Create the default registry from settings.

    Args:
        settings: Application settings
        client: Shared HTTP client for API providers (one per provider if None)
    """
    timeout = settings.request_timeout_seconds
    mimes = settings.supported_mime_set

    if not settings.youtube_api_key:
        logger.warning("YouTube API key not configured - YouTube lookups will fail")
    if not settings.google_drive_api_key:
        logger.warning("Google Drive API key not configured - Drive lookups will fail")

    return ProviderRegistry(
        [
            DailymotionProvider(
                client=client,
                timeout=timeout,
                search_results_limit=settings.search_results_limit,
                collection_max_items=settings.collection_max_items,
            ),
            GoogleDriveProvider(
                api_key=settings.google_drive_api_key,
                client=client,
                timeout=timeout,
                supported_mime_types=mimes,
                collection_max_items=settings.collection_max_items,
            ),
            VimeoProvider(client=client, timeout=timeout),
            YouTubeProvider(
                api_key=settings.youtube_api_key,
                client=client,
                timeout=timeout,
                search_results_limit=settings.search_results_limit,
                collection_max_items=settings.collection_max_items,
            ),
            DirectVideoProvider(timeout=timeout, supported_mime_types=mimes),
        ]
    )
