"""Health check endpoint."""
import logging
from fastapi import APIRouter, Depends, Request

from voicecall.core.config import Settings
from voicecall.core.dependencies import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    request: Request,
    app_settings: Settings = Depends(get_settings),
):
    """Report liveness and whether the proxy can reach Retell at all."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {
        "status": "healthy",
        "retell_configured": bool(app_settings.retell_api_key),
    }
