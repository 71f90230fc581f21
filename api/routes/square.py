"""routes/square.py – POST /api/sync/square, POST /api/webhook/square"""
import json
import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

from .. import config
from ..deps import get_sync_handler
from ..errors import error_response, field_errors
from ..handlers.sync_handler import InvalidSignature
from ..models import ErrorResponse, SyncResponse, WebhookResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Square"])


@router.post(
    "/sync/square",
    response_model=SyncResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def sync_square(request: Request):
    """Full resync of one Square location into the catalog."""
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return error_response(400, "INVALID_PARAMS", "Request body must be JSON")
    if not isinstance(body, dict):
        return error_response(400, "INVALID_PARAMS", "Request body must be a JSON object")
    try:
        return await get_sync_handler().handle_sync(body)
    except ValidationError as e:
        return error_response(400, "INVALID_PARAMS", "Location ID is required", field_errors(e))
    except Exception as e:
        logger.exception("Square sync error")
        return error_response(500, "SYNC_ERROR", "Failed to sync Square data", {"reason": str(e)})


@router.post(
    "/webhook/square",
    response_model=WebhookResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def square_webhook(request: Request):
    """Square notifications. Signature = base64 HMAC-SHA1 over notification URL + raw body."""
    body = await request.body()
    signature = request.headers.get("x-square-signature", "")
    url = config.SQUARE_WEBHOOK_URL or str(request.url)
    try:
        return await get_sync_handler().handle_webhook(body, signature, url)
    except InvalidSignature:
        logger.error("Invalid webhook signature")
        return error_response(401, "INVALID_SIGNATURE", "Invalid signature")
    except Exception:
        logger.exception("Webhook processing error")
        return error_response(500, "WEBHOOK_ERROR", "Webhook processing failed")
