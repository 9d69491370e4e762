"""Start price repository for Supabase.

The start_px table is maintained outside the sync job and holds the
launch start price of each token, keyed by token index.

Table schema expected:
    start_px (
        index INTEGER PRIMARY KEY,
        start_px TEXT
    )
"""

import structlog

from spotboard.data.models.token import StartPxEntry
from spotboard.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class StartPxRepository:
    """Read-only repository for the start_px reference table."""

    TABLE_NAME = "start_px"

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize repository with Supabase client.

        Args:
            client: Connected SupabaseClient instance.
        """
        self._client = client

    async def get_all(self) -> list[StartPxEntry]:
        """Get all start price entries."""
        rows = await self._client.select(self.TABLE_NAME)
        entries = [StartPxEntry.model_validate(row) for row in rows]
        log.debug("start_px_loaded", count=len(entries))
        return entries

    async def get_by_index(self, index: int) -> StartPxEntry | None:
        """Get the start price entry for a token index, if any."""
        row = await self._client.select_one(self.TABLE_NAME, {"index": index})
        return StartPxEntry.model_validate(row) if row else None
