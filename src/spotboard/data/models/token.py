"""Token-related Pydantic models.

This module defines the stored token record, the start price reference
entries and the summary returned by a sync cycle.

Field provenance on TokenRecord:
    - Machine-derived: rewritten from Hyperliquid on every sync cycle.
    - Reference: ``start_px``, read from the ``start_px`` table.
    - Operator-curated: edited by operators, carried forward by the sync
      and defaulted (see CURATED_DEFAULTS) only when no value exists.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Default for each curated field when no prior value exists
CURATED_DEFAULTS: dict[str, Any] = {
    "team_allocation": None,
    "airdrop1": None,
    "airdrop2": None,
    "dev_reputation": False,
    "spread_less_than_three": False,
    "thick_ob_liquidity": False,
    "no_sell_pressure": False,
    "twitter": "",
    "telegram": "",
    "discord": "",
    "website": "",
    "comment": "",
    "project_description": "",
    "personal_comment": "",
    "highlighted": False,
}

CURATED_FIELDS: tuple[str, ...] = tuple(CURATED_DEFAULTS)


class TokenRecord(BaseModel):
    """Token record for database storage.

    One record per Hyperliquid spot token, identified by ``token_index``
    (unique). Serializes to camelCase for the front end via
    ``model_dump(by_alias=True)``; the store uses snake_case columns.

    Example:
        record = TokenRecord(name="HFUN", token_id="0xbaf2...", index=2, token_index=2)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Machine-derived
    name: str = Field(description="Token ticker")
    token_id: str = Field(description="Hyperliquid opaque token identifier")
    index: int = Field(description="Hyperliquid token index")
    token_index: int = Field(description="Stable identity of the record (unique)")
    mark_px: str | None = Field(default=None, description="Current mark price")
    launch_date: str | None = Field(default=None, description="Deploy date (YYYY-MM-DD)")
    auction_price: str | None = Field(
        default=None, description="Seeded USDC divided by circulating supply"
    )
    launch_circ_supply: str | None = Field(default=None, description="Circulating supply")
    launch_market_cap: str | None = Field(
        default=None, description="start_px times circulating supply, 2 decimals"
    )
    last_updated: datetime | None = Field(default=None, description="Last sync timestamp")

    # Reference
    start_px: str | None = Field(default=None, description="Launch start price")

    # Operator-curated (None until set; see CURATED_DEFAULTS)
    team_allocation: str | None = None
    airdrop1: str | None = None
    airdrop2: str | None = None
    dev_reputation: bool | None = None
    spread_less_than_three: bool | None = None
    thick_ob_liquidity: bool | None = None
    no_sell_pressure: bool | None = None
    twitter: str | None = None
    telegram: str | None = None
    discord: str | None = None
    website: str | None = None
    comment: str | None = None
    project_description: str | None = None
    personal_comment: str | None = None
    highlighted: bool | None = None

    def curated(self) -> dict[str, Any]:
        """Return the operator-curated fields of this record."""
        return {name: getattr(self, name) for name in CURATED_FIELDS}

    def to_row(self) -> dict[str, Any]:
        """Serialize to a snake_case store row."""
        return self.model_dump(mode="json")


class StartPxEntry(BaseModel):
    """Start price reference entry, keyed by token index.

    Attributes:
        index: Hyperliquid token index.
        start_px: Start price as a decimal string.
    """

    model_config = ConfigDict(extra="ignore")

    index: int
    start_px: str | None = None


class TokenSyncResult(BaseModel):
    """Result of a token sync cycle.

    Returned by TokenSyncService.run_cycle() to summarize the cycle.

    Attributes:
        tokens_listed: Tokens returned by the Hyperliquid listing.
        inserted: Records created this cycle.
        updated: Existing records updated this cycle.
        failed: Tokens skipped because of a per-token error.
        deploys_seen: Entries in the secondary deploy listing (None if disabled or failed).
        status: complete or no_results.
        started_at: Cycle start time.
        duration_seconds: Wall time of the cycle.
    """

    tokens_listed: int = Field(default=0, description="Tokens in the listing")
    inserted: int = Field(default=0, description="Newly inserted records")
    updated: int = Field(default=0, description="Existing records updated")
    failed: int = Field(default=0, description="Tokens skipped on error")
    deploys_seen: int | None = Field(default=None, description="Secondary listing size")
    status: str = Field(default="complete", description="Cycle status")
    started_at: datetime | None = Field(default=None, description="Cycle start time")
    duration_seconds: float = Field(default=0.0, description="Cycle wall time")
