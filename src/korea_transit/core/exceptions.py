"""Custom exceptions for Korea transit lookups."""


class TransitError(Exception):
    """Base exception for transit lookup errors."""

    pass


class ValidationError(TransitError):
    """Raised when input validation fails."""

    pass


class ConfigurationError(TransitError):
    """Raised when required configuration is missing or invalid."""

    pass


class NetworkError(TransitError):
    """Raised when there's a network-related error."""

    pass


class ApiTimeoutError(NetworkError):
    """Raised when an upstream request does not answer in time."""

    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout


class ApiError(NetworkError):
    """Raised when an upstream API answers with a non-success HTTP status."""

    def __init__(
        self, message: str, status_code: int | None = None, url: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class UpstreamError(TransitError):
    """Raised when the upstream envelope reports a failure status."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class FeatureDisabledError(TransitError):
    """Raised when a tool needs configuration that was not provided."""

    pass


class ToolExecutionError(TransitError):
    """Raised to hand a failed tool result to the MCP library."""

    pass
