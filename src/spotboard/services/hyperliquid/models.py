"""Pydantic models for Hyperliquid info API responses.

Only the fields the token sync depends on are modelled; anything else
in the payload is ignored.

API Documentation: https://hyperliquid.gitbook.io/hyperliquid-docs/for-developers/api/info-endpoint/spot
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _stringify(v: Any) -> Any:
    # Numeric fields arrive as strings, but tolerate bare numbers
    if isinstance(v, int | float) and not isinstance(v, bool):
        return str(v)
    return v


class SpotToken(BaseModel):
    """Token entry from the ``spotMeta`` listing.

    Attributes:
        name: Token ticker (e.g., "HFUN").
        token_id: Opaque hex identifier used by ``tokenDetails``.
        index: Stable integer index, the token's identity in storage.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    token_id: str = Field(alias="tokenId")
    index: int


class TokenDetails(BaseModel):
    """Response from the ``tokenDetails`` request.

    Attributes:
        name: Token name; its presence marks the token as existing.
        mark_px: Current mark price as a decimal string.
        deploy_time: ISO-8601 deploy timestamp.
        seeded_usdc: USDC seeded in the launch auction.
        circulating_supply: Circulating supply as a decimal string.
        airdrop1: First airdrop allocation, if the API reports one.
        airdrop2: Second airdrop allocation, if the API reports one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    mark_px: str | None = Field(default=None, alias="markPx")
    deploy_time: str | None = Field(default=None, alias="deployTime")
    seeded_usdc: str | None = Field(default=None, alias="seededUsdc")
    circulating_supply: str | None = Field(default=None, alias="circulatingSupply")
    airdrop1: str | None = None
    airdrop2: str | None = None

    @field_validator(
        "mark_px",
        "seeded_usdc",
        "circulating_supply",
        "airdrop1",
        "airdrop2",
        mode="before",
    )
    @classmethod
    def coerce_numeric_to_str(cls, v: Any) -> Any:
        """Accept numbers where the API normally sends strings."""
        return _stringify(v)
