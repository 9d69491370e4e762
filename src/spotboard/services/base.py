"""Base API client for rate-limited upstream requests.

This module provides BaseAPIClient, which owns a lazily created httpx
client and routes every request through a shared WeightedRateLimiter.
HTTP failures are translated into the Spotboard exception hierarchy:
429 becomes RateLimitExceededError (retried by the limiter), anything
else becomes ExternalServiceError (not retried).
"""

from typing import Any

import httpx
import structlog

from spotboard.core.exceptions import ExternalServiceError, RateLimitExceededError
from spotboard.services.rate_limiter import WeightedRateLimiter

log = structlog.get_logger(__name__)


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class BaseAPIClient:
    """Base API client with weighted rate limiting.

    Provides:
    - Lazy client initialization (created on first request)
    - Weight budget, concurrency bound and 429 backoff via the limiter
    - A request timeout so a hung upstream cannot block a sync cycle
    - Proper resource cleanup

    Attributes:
        service: Service name used in errors and logs.
        base_url: Base URL for all requests.
        timeout: Request timeout in seconds.
        headers: Default headers for all requests.

    Example:
        limiter = WeightedRateLimiter()
        client = BaseAPIClient("example", "https://api.example.com", limiter)
        response = await client.post("/info", weight=20, json={"type": "spotMeta"})
        await client.close()
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        rate_limiter: WeightedRateLimiter,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize BaseAPIClient.

        Args:
            service: Service name used in errors and logs.
            base_url: Base URL for all requests.
            rate_limiter: Limiter shared by all clients of the same quota.
            timeout: Request timeout in seconds (default: 30).
            headers: Default headers for all requests.
        """
        self.service = service
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._rate_limiter = rate_limiter
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization).

        Returns:
            The httpx AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.base_url)

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make a single HTTP request and translate failures.

        Raises:
            RateLimitExceededError: On HTTP 429.
            ExternalServiceError: On any other HTTP or transport error.
        """
        client = await self._get_client()

        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 429:
                log.warning(
                    "request_rate_limited",
                    service=self.service,
                    method=method,
                    path=path,
                )
                raise RateLimitExceededError(
                    service=self.service,
                    retry_after=_parse_retry_after(e.response),
                ) from e

            log.warning(
                "request_http_error",
                service=self.service,
                method=method,
                path=path,
                status_code=status_code,
            )
            raise ExternalServiceError(
                service=self.service,
                message=str(e),
                status_code=status_code,
            ) from e

        except (httpx.TimeoutException, httpx.RequestError) as e:
            log.warning(
                "request_connection_error",
                service=self.service,
                method=method,
                path=path,
                error=str(e),
            )
            raise ExternalServiceError(
                service=self.service,
                message=f"{type(e).__name__}: {e}",
            ) from e

    async def _request(
        self,
        method: str,
        path: str,
        weight: int = 1,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request through the rate limiter.

        Args:
            method: HTTP method (GET, POST).
            path: Request path (appended to base_url).
            weight: Weight charged against the shared budget.
            **kwargs: Additional arguments passed to httpx.request.

        Returns:
            httpx.Response on success.
        """
        log.debug("request_submitted", service=self.service, method=method, path=path)
        return await self._rate_limiter.execute(
            lambda: self._send(method, path, **kwargs),
            weight=weight,
        )

    async def get(self, path: str, weight: int = 1, **kwargs: Any) -> httpx.Response:
        """Make a GET request.

        Args:
            path: Request path.
            weight: Weight charged against the shared budget.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            httpx.Response on success.
        """
        return await self._request("GET", path, weight=weight, **kwargs)

    async def post(self, path: str, weight: int = 1, **kwargs: Any) -> httpx.Response:
        """Make a POST request.

        Args:
            path: Request path.
            weight: Weight charged against the shared budget.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            httpx.Response on success.
        """
        return await self._request("POST", path, weight=weight, **kwargs)
