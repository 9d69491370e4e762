"""Hypurrscan API client for spot deploy listings.

Hypurrscan indexes Hyperliquid spot deploy auctions. The token sync
fetches this listing alongside ``spotMeta`` for visibility only; its
contents never decide what gets written.
"""

from typing import Any

import structlog

from spotboard.core.exceptions import MalformedResponseError
from spotboard.services.base import BaseAPIClient
from spotboard.services.rate_limiter import WeightedRateLimiter

log = structlog.get_logger(__name__)


class HypurrscanClient(BaseAPIClient):
    """Hypurrscan client for past spot deploy auctions.

    Shares the process-wide limiter so the concurrent listing fetches of
    a sync cycle stay inside one concurrency bound.
    """

    SERVICE_NAME = "hypurrscan"
    SPOT_DEPLOYS_PATH = "/pastAuctionsSpot"
    SPOT_DEPLOYS_WEIGHT = 20
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        rate_limiter: WeightedRateLimiter,
        timeout: float | None = None,
    ) -> None:
        """Initialize Hypurrscan client.

        Args:
            base_url: Hypurrscan API base URL.
            rate_limiter: Limiter shared across the process.
            timeout: Request timeout in seconds (default: 30).
        """
        super().__init__(
            service=self.SERVICE_NAME,
            base_url=base_url,
            rate_limiter=rate_limiter,
            timeout=timeout or self.DEFAULT_TIMEOUT,
        )
        log.info("hypurrscan_client_initialized", base_url=self.base_url)

    async def fetch_spot_deploys(self) -> list[dict[str, Any]]:
        """Fetch past spot deploy auctions.

        Returns:
            Raw deploy entries as returned by the API.

        Raises:
            MalformedResponseError: If the response is not a list.
            ExternalServiceError: If the request fails.
        """
        response = await self.get(self.SPOT_DEPLOYS_PATH, weight=self.SPOT_DEPLOYS_WEIGHT)
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message="Non-JSON spot deploy listing",
            ) from e

        if not isinstance(data, list):
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message=f"Unexpected spot deploy listing type: {type(data).__name__}",
            )

        deploys = [item for item in data if isinstance(item, dict)]
        log.info("spot_deploys_fetched", count=len(deploys))
        return deploys
