"""
tests/test_square.py – SquareClient over a mocked transport + webhook signatures.
"""
import base64
import hashlib
import hmac
import json

import httpx
import pytest

from api.core.square import (
    SANDBOX_BASE_URL, PRODUCTION_BASE_URL, SquareAPIError, SquareClient, SquareConfigError,
    parse_quantity, verify_webhook_signature,
)

LOCATION = {
    "id": "L1",
    "name": "Byron Threads",
    "status": "ACTIVE",
    "address": {"address_line_1": "1 Jonson St", "locality": "Byron Bay",
                "administrative_district_level_1": "NSW", "postal_code": "2481"},
    "coordinates": {"latitude": -28.6434, "longitude": 153.6148},
}

ITEMS = [
    {"id": "I1", "type": "ITEM", "item_data": {"name": "Black Hoodie", "description": "Heavyweight", "category_id": "C1"}},
    {"id": "I2", "type": "ITEM", "item_data": {}},
]

VARIATIONS = [
    {"id": "V1", "type": "ITEM_VARIATION",
     "item_variation_data": {"item_id": "I1", "name": "Small", "price_money": {"amount": 4995}, "sku": "BH-S"}},
    {"id": "V2", "type": "ITEM_VARIATION",
     "item_variation_data": {"item_id": "I1", "price_money": {"amount": 5000}}},
]


class FakeSquare:
    """Routes requests to canned Square payloads and records what was asked."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"errors": [{"detail": "nope"}]})

        path = request.url.path
        if path == "/v2/locations/L1":
            return httpx.Response(200, json={"location": LOCATION})
        if path == "/v2/catalog/list":
            objects = ITEMS if request.url.params["types"] == "ITEM" else VARIATIONS
            # two pages: first object, then the rest
            if request.url.params.get("cursor") == "page-2":
                return httpx.Response(200, json={"objects": objects[1:]})
            return httpx.Response(200, json={"objects": objects[:1], "cursor": "page-2"})
        if path == "/v2/inventory/counts/batch-retrieve":
            body = json.loads(request.content)
            if body.get("cursor"):
                return httpx.Response(200, json={"counts": [{"catalog_object_id": "V2", "quantity": "2.0"}]})
            return httpx.Response(200, json={
                "counts": [{"catalog_object_id": "V1", "quantity": "5", "calculated_at": "2024-05-01T09:30:00Z"}],
                "cursor": "c2",
            })
        return httpx.Response(404, json={})


@pytest.fixture
def fake():
    return FakeSquare()


@pytest.fixture
def client(fake):
    return SquareClient("test-token", transport=httpx.MockTransport(fake))


class TestSquareClient:
    def test_environment_selects_base_url(self):
        assert SquareClient("t")._base_url == SANDBOX_BASE_URL
        assert SquareClient("t", environment="production")._base_url == PRODUCTION_BASE_URL

    @pytest.mark.asyncio
    async def test_headers_sent(self, client, fake):
        await client.get_location("L1")
        headers = fake.requests[0].headers
        assert headers["authorization"] == "Bearer test-token"
        assert headers["square-version"] == "2024-01-18"

    @pytest.mark.asyncio
    async def test_list_catalog_follows_cursor(self, client, fake):
        objects = await client.list_catalog("ITEM")
        assert [o["id"] for o in objects] == ["I1", "I2"]
        assert len(fake.requests) == 2

    @pytest.mark.asyncio
    async def test_inventory_follows_cursor(self, client, fake):
        counts = await client.get_inventory("L1", ["V1", "V2"])
        assert [(c.variation_id, c.quantity) for c in counts] == [("V1", 5), ("V2", 2)]
        first_body = json.loads(fake.requests[0].content)
        assert first_body == {"location_ids": ["L1"], "catalog_object_ids": ["V1", "V2"]}

    @pytest.mark.asyncio
    async def test_snapshot(self, client):
        snapshot = await client.fetch_snapshot("L1")
        assert snapshot.location["name"] == "Byron Threads"

        hoodie, unnamed = snapshot.products
        assert (hoodie.name, hoodie.description, hoodie.category) == ("Black Hoodie", "Heavyweight", "C1")
        assert [(v.id, v.name, v.price, v.sku) for v in hoodie.variations] == [
            ("V1", "Small", 49.95, "BH-S"),
            ("V2", "Default", 50.0, None),
        ]
        assert unnamed.name == "Unnamed Product"
        assert unnamed.variations == []
        assert len(snapshot.inventory) == 2

    @pytest.mark.asyncio
    async def test_missing_location(self, client):
        with pytest.raises(SquareAPIError):
            await client.get_location("unknown")

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = SquareClient("t", transport=httpx.MockTransport(FakeSquare(status_code=401)))
        with pytest.raises(SquareAPIError) as exc:
            await client.get_location("L1")
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_token(self, fake):
        client = SquareClient("", transport=httpx.MockTransport(fake))
        with pytest.raises(SquareConfigError):
            await client.fetch_snapshot("L1")
        assert fake.requests == []


class TestParseQuantity:
    @pytest.mark.parametrize("raw, expected", [
        ("5", 5),
        ("2.0", 2),
        (3, 3),
        ("-4", 0),
        (None, 0),
        ("lots", 0),
        ("inf", 0),
    ])
    def test_parse(self, raw, expected):
        assert parse_quantity(raw) == expected


# ── Webhook signature ──────────────────────────────────────────────────────────

URL  = "https://shop.example.com/api/webhook/square"
KEY  = "sig-key"
BODY = b'{"type":"inventory.count.updated"}'


def _sign(url: str, body: bytes, key: str) -> str:
    return base64.b64encode(hmac.new(key.encode(), url.encode() + body, hashlib.sha1).digest()).decode()


class TestWebhookSignature:
    def test_valid(self):
        assert verify_webhook_signature(BODY, _sign(URL, BODY, KEY), URL, KEY)

    def test_tampered_body(self):
        assert not verify_webhook_signature(BODY + b" ", _sign(URL, BODY, KEY), URL, KEY)

    def test_wrong_url(self):
        assert not verify_webhook_signature(BODY, _sign(URL, BODY, KEY), URL + "/", KEY)

    def test_empty_signature(self):
        assert not verify_webhook_signature(BODY, "", URL, KEY)

    def test_missing_key(self):
        with pytest.raises(SquareConfigError):
            verify_webhook_signature(BODY, "anything", URL, "")
