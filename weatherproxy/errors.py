"""Error taxonomy for city lookups and upstream calls."""


class ProxyError(Exception):
    """Base class for errors surfaced to API callers as JSON envelopes."""

    category = "proxy_error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ProxyError):
    """Raised when a caller-supplied city is not a supported region."""

    category = "invalid_city"

    def __init__(self, city: str, valid_cities: tuple[str, ...] | list[str]):
        self.city = city
        self.valid_cities = list(valid_cities)
        super().__init__(
            f"Invalid city name: {city!r}. "
            f"Use one of: {', '.join(self.valid_cities)}",
            400,
        )


class ConfigurationError(ProxyError):
    """Raised when the service is missing required operator configuration."""

    category = "configuration_error"


class UpstreamError(ProxyError):
    """Raised when the CWA API call fails or answers with an error status.

    ``status_code`` carries the upstream HTTP status, or None for transport
    failures.
    """

    category = "upstream_error"

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class NotFoundError(ProxyError):
    """Raised when the upstream payload has no record for the region."""

    category = "not_found"

    def __init__(self, city: str):
        self.city = city
        super().__init__(f"No forecast data available for {city}", 404)


class MalformedUpstreamDataError(ProxyError):
    """Raised when the upstream payload does not have the expected shape."""

    category = "malformed_upstream_data"
