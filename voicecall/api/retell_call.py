"""Retell proxy endpoint used by the call widget."""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from voicecall.core.dependencies import get_retell_proxy
from voicecall.services.retell.exceptions import RetellError
from voicecall.services.retell.proxy import RetellProxyService

router = APIRouter()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def error_response(message: str) -> JSONResponse:
    """Build the error envelope returned for every failure."""
    return JSONResponse(
        status_code=500,
        content={"error": message, "status": "error"},
        headers=CORS_HEADERS,
    )


@router.options("/functions/retell-call")
async def retell_call_preflight():
    """Answer CORS preflight with an empty body."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/functions/retell-call")
async def retell_call(
    request: Request,
    proxy: RetellProxyService = Depends(get_retell_proxy),
):
    """
    Forward a widget action to Retell.

    Accepts ``{action, agent_id, phone_number}`` and relays the upstream JSON,
    or answers 500 with ``{error, status: "error"}``.
    """
    logger.info(
        f"[RETELL PROXY] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else None
        except ValueError:
            body = None
            logger.warning("[RETELL PROXY] Request body is not valid JSON")

        status_code, data = await proxy.handle(body)
        logger.info(f"[RETELL PROXY] Relaying upstream response - Status: {status_code}")
        return JSONResponse(status_code=status_code, content=data, headers=CORS_HEADERS)

    except RetellError as e:
        logger.error(
            f"[RETELL PROXY] Error in retell-call - {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        return error_response(str(e))

    except Exception as e:
        logger.error(
            f"[RETELL PROXY] Unexpected error in retell-call - {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        return error_response("Failed to reach Retell API")
