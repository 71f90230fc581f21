"""
core/square.py – SquareClient class + webhook signature check.
Responsibility: talk to the Square REST API (locations, catalog, inventory).
No database access here; api/core/sync.py persists what this returns.

All HTTP goes through one httpx.AsyncClient so tests can swap the transport.
"""
import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

PRODUCTION_BASE_URL = "https://connect.squareup.com"
SANDBOX_BASE_URL    = "https://connect.squareupsandbox.com"


class SquareAPIError(RuntimeError):
    """Square answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Square API {status_code}: {message}")
        self.status_code = status_code


class SquareConfigError(RuntimeError):
    """A required Square setting is missing."""


# ── Snapshot types ─────────────────────────────────────────────────────────────

@dataclass
class SquareVariation:
    id: str
    name: str
    price: float
    sku: Optional[str] = None


@dataclass
class SquareProduct:
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    variations: list[SquareVariation] = field(default_factory=list)


@dataclass
class SquareInventoryCount:
    variation_id: str
    quantity: int
    calculated_at: Optional[str] = None


@dataclass
class CatalogSnapshot:
    """Everything one location sync needs: the location, its items and their counts."""
    location: dict[str, Any]
    products: list[SquareProduct]
    inventory: list[SquareInventoryCount]


# ── Client ─────────────────────────────────────────────────────────────────────

class SquareClient:
    """Thin async wrapper over the Square v2 REST endpoints we use."""

    def __init__(
        self,
        access_token: str,
        environment: str = "sandbox",
        api_version: str = "2024-01-18",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self._access_token = access_token
        self._base_url     = PRODUCTION_BASE_URL if environment == "production" else SANDBOX_BASE_URL
        self._api_version  = api_version
        self._transport    = transport
        self._timeout      = timeout

    # ── Public ─────────────────────────────────────────────────────────────────

    async def get_location(self, location_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"/v2/locations/{location_id}")
        location = data.get("location")
        if not location:
            raise SquareAPIError(404, f"Location {location_id} not found")
        return location

    async def list_catalog(self, object_type: str) -> list[dict[str, Any]]:
        """All catalog objects of one type, following cursors."""
        objects: list[dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            params = {"types": object_type}
            if cursor:
                params["cursor"] = cursor
            data = await self._request("GET", "/v2/catalog/list", params=params)
            objects.extend(data.get("objects") or [])
            cursor = data.get("cursor")
            if not cursor:
                return objects

    async def get_inventory(self, location_id: str, variation_ids: list[str]) -> list[SquareInventoryCount]:
        counts: list[SquareInventoryCount] = []
        cursor: Optional[str] = None
        while True:
            body: dict[str, Any] = {"location_ids": [location_id]}
            if variation_ids:
                body["catalog_object_ids"] = variation_ids
            if cursor:
                body["cursor"] = cursor
            data = await self._request("POST", "/v2/inventory/counts/batch-retrieve", json=body)
            for c in data.get("counts") or []:
                counts.append(SquareInventoryCount(
                    variation_id=c["catalog_object_id"],
                    quantity=parse_quantity(c.get("quantity")),
                    calculated_at=c.get("calculated_at"),
                ))
            cursor = data.get("cursor")
            if not cursor:
                return counts

    async def fetch_snapshot(self, location_id: str) -> CatalogSnapshot:
        """Location + items (with variations) + inventory counts for one Square location."""
        location   = await self.get_location(location_id)
        items      = await self.list_catalog("ITEM")
        variations = await self.list_catalog("ITEM_VARIATION")

        products = self._to_products(items, variations)
        variation_ids = [v.id for p in products for v in p.variations]
        inventory = await self.get_inventory(location_id, variation_ids) if variation_ids else []

        logger.info("[Square] location %s: %d items, %d variations, %d counts",
                    location_id, len(products), len(variation_ids), len(inventory))
        return CatalogSnapshot(location=location, products=products, inventory=inventory)

    # ── Private ────────────────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        if not self._access_token:
            raise SquareConfigError("SQUARE_ACCESS_TOKEN environment variable is required")
        async with httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport,
        ) as client:
            response = await client.request(method, path, headers=self._headers(), **kwargs)
        if response.status_code >= 400:
            logger.error(f"Square {method} {path} failed: {response.status_code} - {response.text[:200]}")
            raise SquareAPIError(response.status_code, response.text[:200])
        return response.json()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Square-Version": self._api_version,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _to_products(items: list[dict], variations: list[dict]) -> list[SquareProduct]:
        by_item: dict[str, list[SquareVariation]] = {}
        for obj in variations:
            if obj.get("type") != "ITEM_VARIATION":
                continue
            data = obj.get("item_variation_data") or {}
            amount = (data.get("price_money") or {}).get("amount") or 0
            by_item.setdefault(data.get("item_id"), []).append(SquareVariation(
                id=obj["id"],
                name=data.get("name") or "Default",
                price=int(amount) / 100,   # cents → dollars
                sku=data.get("sku") or None,
            ))

        products = []
        for item in items:
            data = item.get("item_data") or {}
            products.append(SquareProduct(
                id=item["id"],
                name=data.get("name") or "Unnamed Product",
                description=data.get("description") or None,
                category=data.get("category_id") or None,
                variations=by_item.get(item["id"], []),
            ))
        return products


def parse_quantity(raw: Any) -> int:
    """Square sends quantities as decimal strings ("5", "2.0"); anything unparsable is 0."""
    try:
        return max(int(float(raw)), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def verify_webhook_signature(body: bytes, signature: str, url: str, signature_key: str) -> bool:
    """base64(HMAC-SHA1(key, url + body)) compared in constant time."""
    if not signature_key:
        raise SquareConfigError("SQUARE_WEBHOOK_SIGNATURE_KEY is required")
    digest = hmac.new(signature_key.encode("utf-8"), url.encode("utf-8") + body, hashlib.sha1).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
