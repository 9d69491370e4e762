"""Token repository for Supabase.

This module provides a repository for the tokens table, which holds one
TokenRecord per Hyperliquid spot token.

Table schema expected:
    tokens (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        token_index INTEGER UNIQUE NOT NULL,
        index INTEGER NOT NULL,
        token_id TEXT NOT NULL,
        name TEXT NOT NULL,
        mark_px TEXT,
        launch_date TEXT,
        auction_price TEXT,
        launch_circ_supply TEXT,
        launch_market_cap TEXT,
        start_px TEXT,
        last_updated TIMESTAMPTZ,
        team_allocation TEXT,
        airdrop1 TEXT,
        airdrop2 TEXT,
        dev_reputation BOOLEAN DEFAULT FALSE,
        spread_less_than_three BOOLEAN DEFAULT FALSE,
        thick_ob_liquidity BOOLEAN DEFAULT FALSE,
        no_sell_pressure BOOLEAN DEFAULT FALSE,
        twitter TEXT DEFAULT '',
        telegram TEXT DEFAULT '',
        discord TEXT DEFAULT '',
        website TEXT DEFAULT '',
        comment TEXT DEFAULT '',
        project_description TEXT DEFAULT '',
        personal_comment TEXT DEFAULT '',
        highlighted BOOLEAN DEFAULT FALSE
    )
"""

import structlog

from spotboard.data.models.token import TokenRecord
from spotboard.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class TokenRepository:
    """Repository for accessing the tokens table in Supabase.

    Errors from the store propagate as StoreUnavailableError; this
    repository does not swallow them, since the sync must abort its
    cycle when the store is unreachable.

    Attributes:
        _client: SupabaseClient instance for database operations.

    Example:
        client = await get_supabase_client()
        repo = TokenRepository(client)
        records = await repo.get_all()
    """

    TABLE_NAME = "tokens"

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize repository with Supabase client.

        Args:
            client: Connected SupabaseClient instance.
        """
        self._client = client

    async def get_all(self) -> list[TokenRecord]:
        """Get all token records.

        Returns:
            Every stored TokenRecord.
        """
        rows = await self._client.select(self.TABLE_NAME)
        return [TokenRecord.model_validate(row) for row in rows]

    async def get_by_index(self, token_index: int) -> TokenRecord | None:
        """Get a single token record by its index.

        Args:
            token_index: Hyperliquid token index.

        Returns:
            TokenRecord if found, None otherwise.
        """
        row = await self._client.select_one(self.TABLE_NAME, {"token_index": token_index})
        return TokenRecord.model_validate(row) if row else None

    async def insert(self, record: TokenRecord) -> None:
        """Insert a new token record."""
        await self._client.insert(self.TABLE_NAME, record.to_row())
        log.debug("token_inserted", token_index=record.token_index, name=record.name)

    async def update_by_index(self, record: TokenRecord) -> TokenRecord | None:
        """Replace the stored fields of the record with the same index.

        Returns:
            The updated record, or None if no row has that index.
        """
        row = await self._client.update(
            self.TABLE_NAME,
            {"token_index": record.token_index},
            record.to_row(),
        )
        if row is None:
            return None
        log.debug("token_updated", token_index=record.token_index, name=record.name)
        return TokenRecord.model_validate(row)

    async def upsert(self, record: TokenRecord) -> bool:
        """Update the record by index, inserting it if no row matches.

        Returns:
            True if a new row was inserted, False if one was updated.
        """
        if await self.update_by_index(record) is not None:
            return False
        log.info("token_update_missed_inserting", token_index=record.token_index)
        await self.insert(record)
        return True
