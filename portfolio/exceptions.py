"""Portfolio exception classes."""


class PortfolioError(Exception):
    """Base exception for all portfolio errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(PortfolioError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(PortfolioError):
    """Raised when user-supplied data fails validation."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__("VALIDATION_ERROR", message)
        self.fields = fields or []


class StorageError(PortfolioError):
    """Raised by key-value stores when a read or write fails."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__("STORAGE_ERROR", message)
        self.key = key


class ApiError(PortfolioError):
    """Raised on unexpected responses from the profile API."""

    def __init__(
        self, code: str, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code


class AuthorizationError(ApiError):
    """Raised when access is denied (401/403)."""

    pass


class NotFoundError(ApiError):
    """Raised when a resource is not found."""

    pass


class RateLimitedError(ApiError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(code, message, status_code)
        self.retry_after = retry_after


class ServerError(ApiError):
    """Raised on server errors (5xx) and connection failures."""

    pass
