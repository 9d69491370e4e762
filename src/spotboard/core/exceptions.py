"""Spotboard exception hierarchy.

This module defines the base exception class and specialized exceptions
for the failure categories of the token sync job.
"""


class SpotboardError(Exception):
    """Base exception for all Spotboard errors.

    All custom exceptions in Spotboard should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ConfigurationError(SpotboardError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("Missing required env var: SUPABASE_URL")
    """

    pass


class StoreUnavailableError(SpotboardError):
    """Raised when the token store cannot be reached or an operation fails.

    Fatal to the current sync cycle. Writes already committed are kept.

    Example:
        raise StoreUnavailableError("Supabase: Connection refused")
    """

    pass


class ParseError(SpotboardError):
    """Raised when a numeric input cannot be parsed as a decimal.

    Attributes:
        value: The raw value that failed to parse.
    """

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value


class ExternalServiceError(SpotboardError):
    """Raised when an external service call fails.

    Attributes:
        service: Name of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="hyperliquid", message="Bad gateway", status_code=502)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class RateLimitExceededError(ExternalServiceError):
    """Raised when an upstream API rejects a request with HTTP 429.

    Retried by WeightedRateLimiter; callers only see it once retries run out.

    Attributes:
        retry_after: Seconds from the Retry-After header, if sent.
    """

    def __init__(
        self,
        service: str,
        message: str = "Rate limited",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(service=service, message=message, status_code=429)
        self.retry_after = retry_after


class MalformedResponseError(ExternalServiceError):
    """Raised when an upstream response lacks a field the sync depends on.

    Not retried. During a cycle the affected token is skipped.

    Example:
        raise MalformedResponseError(service="hyperliquid", message="missing 'tokens'")
    """

    pass
