"""
handlers/sync_handler.py – SyncHandler class.
Responsibility: orchestrate Square → catalog sync (full resync + webhooks).
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from ..core.square import SquareClient, verify_webhook_signature
from ..core.sync import CatalogSync
from ..models import MerchantRef, SyncCounts, SyncRequest, SyncResponse, WebhookResponse

logger = logging.getLogger(__name__)


class InvalidSignature(PermissionError):
    """Webhook signature did not match."""


class SyncHandler:
    """Handles /api/sync/square and /api/webhook/square."""

    def __init__(self, square: SquareClient, sync: CatalogSync, signature_key: str) -> None:
        self._square = square
        self._sync = sync
        self._signature_key = signature_key

    # ── Full resync ───────────────────────────────────────────────────────────

    async def handle_sync(self, body: dict[str, Any]) -> SyncResponse:
        """Raises pydantic.ValidationError when locationId is missing."""
        req = SyncRequest.model_validate(body)
        logger.info("[Sync] Starting Square sync for location %s", req.location_id)

        snapshot = await self._square.fetch_snapshot(req.location_id)
        result = await asyncio.get_event_loop().run_in_executor(None, self._sync.apply_snapshot, snapshot)

        return SyncResponse(
            merchant=MerchantRef(id=result.merchant_id, name=result.merchant_name),
            synced=SyncCounts(products=result.products, variations=result.variations, inventory=result.inventory),
            timestamp=datetime.now(timezone.utc),
        )

    # ── Webhook ───────────────────────────────────────────────────────────────

    async def handle_webhook(self, body: bytes, signature: str, url: str) -> WebhookResponse:
        if not verify_webhook_signature(body, signature, url, self._signature_key):
            raise InvalidSignature("Invalid webhook signature")

        event = json.loads(body)
        event_type = event.get("type")
        data = event.get("data") or {}
        logger.info("[Webhook] Received Square event %s", event_type)

        if event_type == "inventory.count.updated":
            counts = data.get("inventory_counts") or (data.get("object") or {}).get("inventory_counts")
            if isinstance(counts, list):
                updated = await asyncio.get_event_loop().run_in_executor(
                    None, self._sync.apply_inventory_counts, counts
                )
                logger.info("[Webhook] %d inventory rows updated", updated)
        elif event_type == "catalog.version.updated":
            # Needs a full resync of the location; POST /api/sync/square does that
            logger.info("[Webhook] Catalog update for location %s", data.get("location_id"))
        else:
            logger.info("[Webhook] Unhandled event type %s", event_type)

        return WebhookResponse(success=True)
