"""Exception classes for video metadata resolution."""


class ProviderError(Exception):
    """Base exception for video provider and resolution errors."""

    pass


class UnresolvableReferenceError(ProviderError):
    """Raised when no provider matches a URL or service id."""

    pass


class InvalidVideoURLError(UnresolvableReferenceError):
    """Raised when a URL is recognized by a provider but carries no video id."""

    pass


class UnsupportedMimeTypeError(ProviderError):
    """Raised when a video exists but its content type is not playable."""

    def __init__(self, mime: str):
        super().__init__(f"Unsupported mime type: {mime}")
        self.mime = mime


class OutOfQuotaError(ProviderError):
    """Raised when a provider's usage quota or rate limit is exhausted."""

    def __init__(self, service: str, message: str | None = None):
        super().__init__(message or f"Out of quota for {service}")
        self.service = service


class ProviderFetchError(ProviderError):
    """Raised on network, HTTP or response parsing failures."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class UnsupportedOperationError(ProviderError):
    """Raised when a provider does not implement an operation (e.g. search)."""

    pass
