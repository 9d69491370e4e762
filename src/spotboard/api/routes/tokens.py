"""Token sync API endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from spotboard.data.models.token import TokenSyncResult
from spotboard.scheduler.jobs import get_token_sync_scheduler

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


class RefreshResponse(BaseModel):
    """Response from a manual token refresh."""

    success: bool
    message: str
    result: TokenSyncResult | None = None


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses={500: {"model": RefreshResponse}},
)
async def refresh_tokens() -> Any:
    """
    Run a token sync cycle now and return its summary.

    Waits for a cycle already in progress before starting a new one.
    """
    try:
        scheduler = await get_token_sync_scheduler()
        result = await scheduler.trigger()
    except Exception as e:
        log.error("token_refresh_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content=RefreshResponse(
                success=False,
                message=f"Token refresh failed: {e}",
            ).model_dump(mode="json"),
        )

    return RefreshResponse(success=True, message="Token refresh complete", result=result)
