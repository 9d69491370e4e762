"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from spotboard.api.routes import health, tokens
from spotboard.config.logging import configure_logging
from spotboard.config.settings import get_settings
from spotboard.data.supabase.client import close_supabase_client, get_supabase_client
from spotboard.scheduler.jobs import close_token_sync_scheduler, get_token_sync_scheduler
from spotboard.scheduler.token_sync_scheduler import shutdown_scheduler

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    configure_logging()
    log.info("application_starting")
    settings = get_settings()

    try:
        await get_supabase_client()
    except Exception as e:
        log.warning("supabase_connection_skipped", error=str(e))

    if settings.sync_scheduler_enabled:
        try:
            scheduler = await get_token_sync_scheduler()
            await scheduler.start()
        except Exception as e:
            log.warning("token_sync_scheduler_start_skipped", error=str(e))
    else:
        log.info("token_sync_scheduler_disabled")

    log.info("application_started")

    yield

    # Shutdown
    log.info("application_stopping")

    try:
        await close_token_sync_scheduler()
    except Exception as e:
        log.warning("token_sync_scheduler_stop_error", error=str(e))

    await shutdown_scheduler()
    await close_supabase_client()
    log.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Hyperliquid spot token board",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Routes
    app.include_router(health.router)
    app.include_router(tokens.router, prefix="/api")

    return app
