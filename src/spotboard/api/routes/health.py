"""Health check endpoint with store, scheduler and rate limiter status."""

from typing import Any

from fastapi import APIRouter

from spotboard.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        dict with overall status, version, store health, token sync
        scheduler info and rate limiter stats.
    """
    settings = get_settings()

    supabase_health = await _get_supabase_health()
    scheduler_info = _get_scheduler_status()

    return {
        "status": "ok" if supabase_health["healthy"] else "degraded",
        "version": settings.app_version,
        "databases": {"supabase": supabase_health},
        "scheduler": scheduler_info,
        "rate_limiter": _get_rate_limiter_stats(),
    }


async def _get_supabase_health() -> dict[str, Any]:
    """Get Supabase health status."""
    # Late import to read the current singleton
    import spotboard.data.supabase.client as supabase_module  # noqa: PLC0415

    client = supabase_module._supabase_client
    if client is None:
        return {"status": "disconnected", "healthy": False}
    return await client.health_check()


def _get_scheduler_status() -> dict[str, Any]:
    """Get token sync scheduler status."""
    import spotboard.scheduler.jobs as jobs_module  # noqa: PLC0415

    settings = get_settings()
    scheduler = jobs_module._token_sync_scheduler
    if scheduler is None:
        return {"enabled": settings.sync_scheduler_enabled, "running": False}
    return {"enabled": settings.sync_scheduler_enabled, **scheduler.status()}


def _get_rate_limiter_stats() -> dict[str, Any] | None:
    """Get rate limiter stats, or None before the limiter exists."""
    import spotboard.scheduler.jobs as jobs_module  # noqa: PLC0415

    limiter = jobs_module._rate_limiter
    return limiter.stats() if limiter is not None else None
