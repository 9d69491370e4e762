"""Token sync service reconciling Hyperliquid data into the token store.

This module provides the TokenSyncService which runs one sync cycle:
1. Snapshot stored token records and start prices (two full scans)
2. Fetch the Hyperliquid listing (and the optional deploy listing)
3. For each listed token, fetch details and merge onto the snapshot
4. Upsert each record by token_index (update, falling back to insert)

Architecture:
    TokenSyncScheduler / manual trigger
        │
        ▼
    TokenSyncService (this module)
        │
        ├──► HyperliquidClient ──► WeightedRateLimiter
        ├──► HypurrscanClient (optional) ──► WeightedRateLimiter
        │
        └──► TokenRepository / StartPxRepository (data/supabase/repositories/)

The snapshot taken in step 1 is the merge base for the whole cycle.
Records are not re-read per token, so curated edits written by another
client during a cycle are overwritten by that cycle's writes.
"""

import asyncio
import time
from datetime import UTC, datetime
from typing import Any

import structlog

from spotboard.core.exceptions import StoreUnavailableError
from spotboard.core.sync.merge import build_token_record
from spotboard.data.models.token import StartPxEntry, TokenRecord, TokenSyncResult
from spotboard.data.supabase.repositories.start_px_repo import StartPxRepository
from spotboard.data.supabase.repositories.token_repo import TokenRepository
from spotboard.services.hyperliquid.client import HyperliquidClient
from spotboard.services.hyperliquid.models import SpotToken
from spotboard.services.hypurrscan.client import HypurrscanClient

log = structlog.get_logger(__name__)


class TokenSyncService:
    """Reconciles the Hyperliquid spot token listing into the token store.

    Attributes:
        _token_repo: Repository for token records.
        _start_px_repo: Repository for start price reference entries.
        _hyperliquid: Client for listing and details.
        _hypurrscan: Optional client for the secondary deploy listing.

    Example:
        limiter = WeightedRateLimiter()
        service = TokenSyncService(
            TokenRepository(supabase),
            StartPxRepository(supabase),
            HyperliquidClient(limiter),
        )
        result = await service.run_cycle()
    """

    def __init__(
        self,
        token_repo: TokenRepository,
        start_px_repo: StartPxRepository,
        hyperliquid: HyperliquidClient,
        hypurrscan: HypurrscanClient | None = None,
    ) -> None:
        """Initialize sync service.

        Args:
            token_repo: Repository for the tokens table.
            start_px_repo: Repository for the start_px table.
            hyperliquid: Hyperliquid client (carries the shared limiter).
            hypurrscan: Secondary deploy listing client, or None to skip it.
        """
        self._token_repo = token_repo
        self._start_px_repo = start_px_repo
        self._hyperliquid = hyperliquid
        self._hypurrscan = hypurrscan

    async def run_cycle(self) -> TokenSyncResult:
        """Execute one sync cycle.

        Returns:
            TokenSyncResult with counts for the cycle.

        Raises:
            StoreUnavailableError: If the store fails; aborts the cycle.
                Records written before the failure are kept.
            ExternalServiceError: If the listing cannot be fetched.

        Note:
            Failures for a single token (bad details, upstream errors,
            exhausted rate limit retries) are logged and counted in
            ``failed``; they never abort the cycle.
        """
        started_at = datetime.now(UTC)
        start = time.monotonic()
        log.info("token_sync_started")

        # Step 1: Snapshot the store
        existing = {record.token_index: record for record in await self._token_repo.get_all()}
        start_prices = {entry.index: entry for entry in await self._start_px_repo.get_all()}

        log.info(
            "token_sync_snapshot_loaded",
            records=len(existing),
            start_prices=len(start_prices),
        )

        # Step 2: Fetch listings concurrently
        tokens, deploys = await asyncio.gather(
            self._hyperliquid.list_tokens(),
            self._fetch_deploys(),
        )

        result = TokenSyncResult(
            tokens_listed=len(tokens),
            deploys_seen=len(deploys) if deploys is not None else None,
            started_at=started_at,
        )

        if not tokens:
            log.info("token_sync_no_tokens_listed")
            result.status = "no_results"
            result.duration_seconds = time.monotonic() - start
            return result

        # Step 3-5: One token at a time to keep the shared budget predictable
        for token in tokens:
            try:
                inserted = await self._sync_token(
                    token,
                    existing.get(token.index),
                    start_prices.get(token.index),
                    started_at,
                )
            except StoreUnavailableError:
                log.error(
                    "token_sync_aborted_store_unavailable",
                    token_index=token.index,
                    inserted=result.inserted,
                    updated=result.updated,
                )
                raise
            except Exception as e:
                result.failed += 1
                log.warning(
                    "token_sync_token_failed",
                    token=token.name,
                    token_index=token.index,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if inserted:
                result.inserted += 1
            else:
                result.updated += 1

        result.duration_seconds = time.monotonic() - start
        log.info(
            "token_sync_completed",
            tokens_listed=result.tokens_listed,
            inserted=result.inserted,
            updated=result.updated,
            failed=result.failed,
            deploys_seen=result.deploys_seen,
            elapsed_seconds=round(result.duration_seconds, 3),
        )
        return result

    async def _sync_token(
        self,
        token: SpotToken,
        existing: TokenRecord | None,
        start_px_entry: StartPxEntry | None,
        now: datetime,
    ) -> bool:
        """Fetch details for one token and write the merged record.

        Returns:
            True if a new record was inserted, False if one was updated.
        """
        details = await self._hyperliquid.token_details(token.token_id)
        record = build_token_record(token, details, start_px_entry, existing, now)

        # The row may exist without a snapshot record; token_index is unique
        inserted = await self._token_repo.upsert(record)
        if inserted:
            log.info("token_created", token=token.name, token_index=token.index)
            return True

        log.debug(
            "token_refreshed",
            token=token.name,
            token_index=token.index,
            mark_px=record.mark_px,
        )
        return inserted

    async def _fetch_deploys(self) -> list[dict[str, Any]] | None:
        """Fetch the secondary deploy listing, if configured.

        Returns:
            Deploy entries, or None if disabled or the fetch failed.
        """
        if self._hypurrscan is None:
            return None
        try:
            return await self._hypurrscan.fetch_spot_deploys()
        except Exception as e:
            log.warning("spot_deploys_fetch_failed", error=str(e))
            return None
