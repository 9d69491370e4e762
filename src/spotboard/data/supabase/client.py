"""Supabase async client with connection management.

Besides connection handling, the client exposes the small set of
document operations the token sync relies on (select all, select one,
insert, update by filter). Every failure is raised as
StoreUnavailableError so callers can treat the store uniformly.
"""

from typing import Any

import structlog
from supabase._async.client import AsyncClient
from supabase._async.client import create_client as create_async_client
from supabase.lib.client_options import AsyncClientOptions
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from spotboard.config.settings import get_settings
from spotboard.core.exceptions import StoreUnavailableError

log = structlog.get_logger()


class SupabaseClient:
    """Async Supabase client wrapper.

    Provides connection management, health checks, and basic CRUD operations
    with retry logic for resilience.
    """

    def __init__(self) -> None:
        """Initialize client with settings."""
        self._client: AsyncClient | None = None
        self._settings = get_settings()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(StoreUnavailableError),
        reraise=True,
    )
    async def connect(self) -> None:
        """Establish connection to Supabase.

        Raises:
            StoreUnavailableError: If connection fails after retries.
        """
        if self._client is not None:
            return

        try:
            options = AsyncClientOptions(schema=self._settings.postgres_schema)
            self._client = await create_async_client(
                self._settings.supabase_url,
                self._settings.supabase_key.get_secret_value(),
                options=options,
            )

            log.info(
                "supabase_connected",
                url=self._settings.supabase_url,
                schema=self._settings.postgres_schema,
            )
        except Exception as e:
            log.error("supabase_connection_failed", error=str(e))
            raise StoreUnavailableError(f"Supabase: {e}") from e

    async def disconnect(self) -> None:
        """Close Supabase connection."""
        if self._client is not None:
            self._client = None
            log.info("supabase_disconnected")

    @property
    def client(self) -> AsyncClient:
        """Get the underlying Supabase client.

        Raises:
            StoreUnavailableError: If not connected.
        """
        if self._client is None:
            raise StoreUnavailableError("Supabase: Client not connected")
        return self._client

    def table(self, name: str) -> Any:
        """Get a query builder for a table."""
        return self.client.table(name)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Select rows matching equality filters (all rows if none).

        Args:
            table: Table name.
            filters: Column/value pairs combined with AND.
            columns: Column list in PostgREST syntax.

        Returns:
            Matching rows.

        Raises:
            StoreUnavailableError: If the query fails.
        """
        try:
            query = self.table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            result = await query.execute()
            return list(result.data or [])
        except StoreUnavailableError:
            raise
        except Exception as e:
            log.error("supabase_select_failed", table=table, error=str(e))
            raise StoreUnavailableError(f"Supabase select on {table}: {e}") from e

    async def select_one(
        self,
        table: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Select the first row matching equality filters.

        Returns:
            The row, or None if nothing matches.
        """
        rows = await self.select(table, filters)
        return rows[0] if rows else None

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        """Insert a single row.

        Returns:
            The inserted row as stored, if returned by the server.

        Raises:
            StoreUnavailableError: If the insert fails.
        """
        try:
            result = await self.table(table).insert(record).execute()
            rows = result.data or []
            return rows[0] if rows else None
        except StoreUnavailableError:
            raise
        except Exception as e:
            log.error("supabase_insert_failed", table=table, error=str(e))
            raise StoreUnavailableError(f"Supabase insert on {table}: {e}") from e

    async def update(
        self,
        table: str,
        filters: dict[str, Any],
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Update rows matching equality filters.

        Returns:
            The first updated row, or None if no row matched.

        Raises:
            StoreUnavailableError: If the update fails.
        """
        try:
            query = self.table(table).update(data)
            for column, value in filters.items():
                query = query.eq(column, value)
            result = await query.execute()
            rows = result.data or []
            return rows[0] if rows else None
        except StoreUnavailableError:
            raise
        except Exception as e:
            log.error("supabase_update_failed", table=table, error=str(e))
            raise StoreUnavailableError(f"Supabase update on {table}: {e}") from e

    async def health_check(self) -> dict[str, Any]:
        """Check Supabase connection health.

        Performs an actual connection verification by attempting
        to access the auth session.

        Returns:
            Dict with status, healthy flag, and optional error.
        """
        if self._client is None:
            return {"status": "disconnected", "healthy": False}

        try:
            await self._client.auth.get_session()
            return {"status": "connected", "healthy": True}
        except Exception as e:
            log.error("supabase_health_check_failed", error=str(e))
            return {"status": "error", "healthy": False, "error": str(e)}


# Singleton instance
_supabase_client: SupabaseClient | None = None


async def get_supabase_client() -> SupabaseClient:
    """Get or create Supabase client singleton.

    Returns:
        Connected SupabaseClient instance.
    """
    global _supabase_client
    if _supabase_client is None:
        client = SupabaseClient()
        await client.connect()
        _supabase_client = client
    return _supabase_client


async def close_supabase_client() -> None:
    """Close and clear Supabase client singleton."""
    global _supabase_client
    if _supabase_client is not None:
        await _supabase_client.disconnect()
        _supabase_client = None
