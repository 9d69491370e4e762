"""Token sync wiring for Spotboard.

Builds the objects a sync cycle needs from settings and keeps the
process-wide instances:
- One WeightedRateLimiter shared by every upstream client
- The TokenSyncScheduler used by the app lifespan and the refresh route

Usage:
    from spotboard.scheduler.jobs import get_token_sync_scheduler

    scheduler = await get_token_sync_scheduler()
    await scheduler.start()
"""

from dataclasses import dataclass, field

import structlog

from spotboard.config.settings import Settings, get_settings
from spotboard.core.sync.token_sync import TokenSyncService
from spotboard.data.models.token import TokenSyncResult
from spotboard.data.supabase.client import SupabaseClient, get_supabase_client
from spotboard.data.supabase.repositories.start_px_repo import StartPxRepository
from spotboard.data.supabase.repositories.token_repo import TokenRepository
from spotboard.scheduler.token_sync_scheduler import TokenSyncScheduler
from spotboard.services.base import BaseAPIClient
from spotboard.services.hyperliquid.client import HyperliquidClient
from spotboard.services.hypurrscan.client import HypurrscanClient
from spotboard.services.rate_limiter import WeightedRateLimiter

log = structlog.get_logger(__name__)


@dataclass
class TokenSyncRuntime:
    """A sync service together with the API clients it owns."""

    service: TokenSyncService
    clients: list[BaseAPIClient] = field(default_factory=list)

    async def close(self) -> None:
        """Close all owned API clients."""
        for client in self.clients:
            await client.close()


def create_rate_limiter(settings: Settings) -> WeightedRateLimiter:
    """Create a rate limiter from settings."""
    return WeightedRateLimiter(
        weight_budget=settings.rate_limit_weight_budget,
        interval_seconds=settings.rate_limit_interval_seconds,
        max_concurrency=settings.rate_limit_max_concurrency,
        max_retries=settings.rate_limit_max_retries,
        base_delay_ms=settings.rate_limit_base_delay_ms,
    )


def build_token_sync_runtime(
    supabase: SupabaseClient,
    rate_limiter: WeightedRateLimiter,
    settings: Settings,
) -> TokenSyncRuntime:
    """Build a TokenSyncService and its clients.

    Args:
        supabase: Connected SupabaseClient.
        rate_limiter: Limiter shared by all clients.
        settings: Application settings.

    Returns:
        TokenSyncRuntime owning the created clients.
    """
    hyperliquid = HyperliquidClient(
        rate_limiter,
        base_url=settings.hyperliquid_api_url,
        timeout=settings.request_timeout_seconds,
    )
    clients: list[BaseAPIClient] = [hyperliquid]

    hypurrscan: HypurrscanClient | None = None
    if settings.hypurrscan_api_url:
        hypurrscan = HypurrscanClient(
            settings.hypurrscan_api_url,
            rate_limiter,
            timeout=settings.request_timeout_seconds,
        )
        clients.append(hypurrscan)

    service = TokenSyncService(
        TokenRepository(supabase),
        StartPxRepository(supabase),
        hyperliquid,
        hypurrscan,
    )
    return TokenSyncRuntime(service=service, clients=clients)


async def run_token_sync_once() -> TokenSyncResult:
    """Run a single sync cycle outside the scheduler.

    Uses its own rate limiter, so do not run it next to a live app
    sharing the same upstream quota.

    Raises:
        Exception: Whatever aborted the cycle.
    """
    settings = get_settings()
    supabase = await get_supabase_client()
    runtime = build_token_sync_runtime(supabase, create_rate_limiter(settings), settings)
    try:
        return await runtime.service.run_cycle()
    finally:
        await runtime.close()


# Process-wide instances
_rate_limiter: WeightedRateLimiter | None = None
_runtime: TokenSyncRuntime | None = None
_token_sync_scheduler: TokenSyncScheduler | None = None


def get_rate_limiter() -> WeightedRateLimiter:
    """Get or create the process-wide rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = create_rate_limiter(get_settings())
    return _rate_limiter


async def get_token_sync_scheduler() -> TokenSyncScheduler:
    """Get or create the process-wide token sync scheduler.

    Returns:
        TokenSyncScheduler (not started).
    """
    global _runtime, _token_sync_scheduler
    if _token_sync_scheduler is None:
        settings = get_settings()
        supabase = await get_supabase_client()
        _runtime = build_token_sync_runtime(supabase, get_rate_limiter(), settings)
        _token_sync_scheduler = TokenSyncScheduler(
            _runtime.service.run_cycle,
            interval_seconds=settings.sync_interval_seconds,
        )
        log.debug("token_sync_scheduler_created")
    return _token_sync_scheduler


async def close_token_sync_scheduler() -> None:
    """Stop the scheduler job, close clients and clear the singletons."""
    global _runtime, _token_sync_scheduler
    if _token_sync_scheduler is not None:
        await _token_sync_scheduler.stop()
        _token_sync_scheduler = None
    if _runtime is not None:
        await _runtime.close()
        _runtime = None
