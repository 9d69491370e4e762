"""Hyperliquid info API client for spot token data.

This module provides a client for the two read operations the token
sync needs: the spot token listing and per-token details.

API Documentation: https://hyperliquid.gitbook.io/hyperliquid-docs/for-developers/api/info-endpoint
Rate Limits: 1200 weight per minute per IP; ``spotMeta`` and
``tokenDetails`` cost 20 each.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from spotboard.core.exceptions import MalformedResponseError
from spotboard.services.base import BaseAPIClient
from spotboard.services.hyperliquid.models import SpotToken, TokenDetails
from spotboard.services.rate_limiter import WeightedRateLimiter

log = structlog.get_logger(__name__)


class HyperliquidClient(BaseAPIClient):
    """Hyperliquid info API client.

    Every request goes through the injected WeightedRateLimiter, so rate
    limit failures surface only after the limiter's retries are exhausted.

    Endpoints used:
        - POST /info {"type": "spotMeta"} - Spot token listing
        - POST /info {"type": "tokenDetails", "tokenId": ...} - Token details

    Example:
        client = HyperliquidClient(WeightedRateLimiter())
        try:
            for token in await client.list_tokens():
                details = await client.token_details(token.token_id)
        finally:
            await client.close()
    """

    SERVICE_NAME = "hyperliquid"
    BASE_URL = "https://api.hyperliquid.xyz"
    INFO_PATH = "/info"
    DEFAULT_TIMEOUT = 30.0
    SPOT_META_WEIGHT = 20
    TOKEN_DETAILS_WEIGHT = 20

    def __init__(
        self,
        rate_limiter: WeightedRateLimiter,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize Hyperliquid client.

        Args:
            rate_limiter: Limiter shared across the process.
            base_url: API base URL (default: public mainnet).
            timeout: Request timeout in seconds (default: 30).
        """
        super().__init__(
            service=self.SERVICE_NAME,
            base_url=base_url or self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=timeout or self.DEFAULT_TIMEOUT,
        )
        log.info("hyperliquid_client_initialized", base_url=self.base_url)

    async def _info(self, body: dict[str, Any], weight: int) -> Any:
        response = await self.post(self.INFO_PATH, weight=weight, json=body)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message=f"Non-JSON response for {body['type']}",
            ) from e

    async def list_tokens(self) -> list[SpotToken]:
        """Fetch the spot token listing.

        Returns:
            Valid SpotToken entries in upstream order. Entries that fail
            validation are logged and skipped.

        Raises:
            MalformedResponseError: If the response has no token list.
            ExternalServiceError: If the request fails.
        """
        data = await self._info({"type": "spotMeta"}, weight=self.SPOT_META_WEIGHT)

        raw_tokens = data.get("tokens") if isinstance(data, dict) else None
        if not isinstance(raw_tokens, list):
            log.warning("spot_meta_missing_tokens", data_type=type(data).__name__)
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message="Invalid spotMeta response: missing 'tokens'",
            )

        tokens: list[SpotToken] = []
        for position, item in enumerate(raw_tokens):
            try:
                tokens.append(SpotToken.model_validate(item))
            except ValidationError as e:
                # Skip only the broken entry
                log.warning(
                    "spot_meta_entry_invalid",
                    position=position,
                    name=item.get("name") if isinstance(item, dict) else None,
                    errors=e.error_count(),
                )

        log.info(
            "spot_tokens_fetched",
            count=len(tokens),
            skipped=len(raw_tokens) - len(tokens),
        )
        return tokens

    async def token_details(self, token_id: str) -> TokenDetails:
        """Fetch details for a single token.

        Args:
            token_id: Opaque token identifier from the listing.

        Returns:
            TokenDetails for the token.

        Raises:
            MalformedResponseError: If the response has no ``name``.
            ExternalServiceError: If the request fails.
        """
        data = await self._info(
            {"type": "tokenDetails", "tokenId": token_id},
            weight=self.TOKEN_DETAILS_WEIGHT,
        )

        if not isinstance(data, dict) or not data.get("name"):
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message=f"Details not found for tokenId: {token_id}",
            )

        try:
            details = TokenDetails.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                service=self.SERVICE_NAME,
                message=f"Invalid tokenDetails for {token_id}: {e.error_count()} errors",
            ) from e

        log.debug(
            "token_details_fetched",
            token_id=token_id,
            name=details.name,
            mark_px=details.mark_px,
        )
        return details
