"""Base provider interface for video services."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..exceptions import (
    OutOfQuotaError,
    ProviderFetchError,
    UnsupportedOperationError,
)
from ..models import Service, Video

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _is_transient(exc: BaseException) -> bool:
    """Transport failures and 5xx responses are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


def parse_url(url: str) -> tuple[str, str]:
    """Return the lowercase hostname and path of a URL ('' when absent or malformed)."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return "", ""
    return (parsed.hostname or "").lower(), parsed.path


def host_matches(host: str, domains: Sequence[str]) -> bool:
    """Check if host is one of domains or a subdomain of one."""
    return any(host == d or host.endswith("." + d) for d in domains)


class BaseProvider(ABC):
    """Abstract base class for all video service providers.

    Providers are stateless per call; configuration such as API keys is set at
    construction. ``priority`` orders URL matching in the registry: lower values
    are tried first, so specific hosts must rank before catch-all matchers.
    """

    priority: int = 10

    def __init__(self, client: httpx.Client | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Initialize provider.

        Args:
            client: HTTP client to use (a default client is created if None)
            timeout: Request timeout in seconds for the default client
        """
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    @property
    @abstractmethod
    def service_id(self) -> Service:
        """Service this provider handles."""
        pass

    @abstractmethod
    def can_handle_link(self, url: str) -> bool:
        """Check if this provider recognizes the URL's shape."""
        pass

    def is_collection_url(self, url: str) -> bool:
        """Check if the URL refers to a playlist, channel or folder.

        Only meaningful when ``can_handle_link(url)`` is true.
        """
        return False

    @abstractmethod
    def get_video_id(self, url: str) -> str:
        """Extract the service-scoped video id from a single-video URL.

        Raises:
            InvalidVideoURLError: If the URL carries no video id
        """
        pass

    def resolve_url(self, url: str) -> list[Video]:
        """Fetch every video referenced by a collection URL.

        Raises:
            UnsupportedOperationError: If the service has no collections
        """
        raise UnsupportedOperationError(f"{self.service_id.value} does not support collections")

    @abstractmethod
    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        """Fetch only the requested metadata fields for a video.

        Args:
            video_id: Service-scoped video id
            fields: Metadata fields to fetch

        Returns:
            Video with at least the requested fields, where obtainable

        Raises:
            OutOfQuotaError: If the service's usage limit is exhausted
            UnsupportedMimeTypeError: If the content cannot be played
            ProviderFetchError: On network or response errors
        """
        pass

    def search_videos(self, query: str) -> list[Video]:
        """Free-text search.

        Raises:
            UnsupportedOperationError: If the service has no search
        """
        raise UnsupportedOperationError(f"{self.service_id.value} does not support search")

    def _is_quota_error(self, response: httpx.Response) -> bool:
        """Check whether an error response signals an exhausted quota."""
        return response.status_code == 429

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )
    def _send(self, method: str, url: str, params: dict[str, Any] | None) -> httpx.Response:
        response = self.client.request(method, url, params=params)
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON document with retries on transient failures.

        Raises:
            OutOfQuotaError: If the response signals an exhausted quota
            ProviderFetchError: On any other HTTP, transport or decoding error
        """
        service = self.service_id.value
        try:
            response = self._send("GET", url, params)
        except httpx.HTTPStatusError as e:
            raise ProviderFetchError(
                service,
                f"{service} API error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ProviderFetchError(service, f"{service} API request failed: {e}") from e

        if response.status_code >= 400:
            if self._is_quota_error(response):
                logger.error(f"{service} quota exhausted ({response.status_code})")
                raise OutOfQuotaError(service)
            raise ProviderFetchError(
                service,
                f"{service} API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderFetchError(service, f"Invalid JSON from {service}: {e}") from e

    def _validate(self, contract: Any, data: Any) -> Any:
        """Validate a response body against a pydantic contract.

        Raises:
            ProviderFetchError: If the body does not match the contract
        """
        try:
            return contract(**data)
        except (ValidationError, TypeError) as e:
            service = self.service_id.value
            raise ProviderFetchError(service, f"Unexpected {service} response: {e}") from e
