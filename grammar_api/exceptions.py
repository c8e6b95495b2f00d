"""Domain-specific exceptions for the Grammar Checker API.

Every error carries the HTTP status and the client-safe message it maps to.
"""


class GrammarAPIError(Exception):
    """Base exception for all Grammar Checker API errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GrammarAPIError):
    """Missing or malformed client input (not Pydantic)."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(GrammarAPIError):
    """Resource already exists."""

    status_code = 409
    default_message = "Username already exists"


class AuthError(GrammarAPIError):
    """Authentication failure of any kind."""

    status_code = 401
    default_message = "Authentication failed"


class UnauthorizedError(AuthError):
    """Bad username or password."""

    default_message = "Invalid username or password"


class MissingTokenError(AuthError):
    """No bearer token on a protected route."""

    default_message = "Access token is required"


class InvalidTokenError(AuthError):
    """Token signature or structure does not verify."""

    default_message = "Invalid token"


class TokenExpiredError(AuthError):
    """Token is past its expiry."""

    default_message = "Token has expired"


class ProxyError(GrammarAPIError):
    """Upstream completion call failed."""

    status_code = 500
    default_message = "Failed to check grammar. Please try again."


class UpstreamAuthError(ProxyError):
    """Upstream rejected our provider credential. Masked from the client."""

    default_message = "Internal server error"


class RateLimitedError(ProxyError):
    """Upstream quota exhausted."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class UpstreamTimeoutError(ProxyError):
    """Upstream did not answer in time."""

    status_code = 504
    default_message = "Grammar check timed out. Please try again."


class StorageError(GrammarAPIError):
    """Error related to storage operations."""


class ConfigurationError(GrammarAPIError):
    """Error related to configuration issues."""
