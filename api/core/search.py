"""
core/search.py – SearchService class.
Responsibility: proximity search (text match → radius → stock → rank) and
product detail lookup over an injected catalog store.

The store is blocking (SQLAlchemy), so calls run in the default executor to
keep the event loop free.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Protocol

from ..db.models import Product
from ..errors import ProductNotFound
from ..models import (
    InventoryInfo, Location, MerchantAddress, MerchantInfo, Pagination, ProductItem,
    SearchMeta, SearchRequest, SearchResponse, VariationItem,
)
from .geo import DEFAULT_LOCATION, Coordinate, haversine_km, round_distance

logger = logging.getLogger(__name__)

# Candidates fetched per requested result; radius/stock filtering happens after
# the fetch, so a query with more than OVERFETCH × limit matches can under-report.
OVERFETCH = 2


class CatalogReader(Protocol):
    def find_candidates(self, query: str, category: Optional[str], take: int) -> list[Product]: ...
    def get_product(self, product_id: str) -> Optional[Product]: ...
    def record_search(
        self, query: str, latitude: Optional[float], longitude: Optional[float],
        radius: Optional[float], results: int,
    ) -> None: ...


class SearchService:
    """Linear-scan radius search ranked by distance, then stock, then name."""

    def __init__(self, store: CatalogReader, default_location: Coordinate = DEFAULT_LOCATION) -> None:
        self._store = store
        self._default_location = default_location

    # ── Public ─────────────────────────────────────────────────────────────────

    async def search(self, params: SearchRequest) -> SearchResponse:
        return await asyncio.get_event_loop().run_in_executor(None, self._run_search, params)

    async def product_detail(
        self, product_id: str, lat: Optional[float] = None, lng: Optional[float] = None,
    ) -> ProductItem:
        """Product with merchant + variations. Distance only when both lat and lng are given."""
        return await asyncio.get_event_loop().run_in_executor(
            None, self._run_detail, product_id, lat, lng
        )

    def resolve_location(self, lat: Optional[float], lng: Optional[float]) -> Coordinate:
        if lat is None or lng is None:
            return self._default_location
        return Coordinate(lat, lng)

    # ── Private: search ────────────────────────────────────────────────────────

    def _run_search(self, params: SearchRequest) -> SearchResponse:
        started = time.perf_counter()
        origin  = self.resolve_location(params.lat, params.lng)

        candidates = self._store.find_candidates(params.query, params.category, params.limit * OVERFETCH)

        ranked: list[tuple[float, ProductItem]] = []
        for product in candidates:
            distance = haversine_km(origin.lat, origin.lng, product.merchant.latitude, product.merchant.longitude)
            if distance > params.radius:
                continue
            stock = self.total_stock(product)
            if params.in_stock and stock == 0:
                continue
            ranked.append((distance, self._orm_to_item(product, distance)))

        ranked.sort(key=lambda pair: (pair[0], -pair[1].total_stock, pair[1].name))
        products = [item for _, item in ranked[:params.limit]]

        self._log_search(params, origin, len(products))
        logger.info("[Search] %r @ (%.4f, %.4f) r=%skm → %d/%d",
                    params.query, origin.lat, origin.lng, params.radius, len(products), len(candidates))

        return SearchResponse(
            products=products,
            pagination=Pagination(total=len(products), page=1, limit=params.limit, has_more=False),
            search_meta=SearchMeta(
                query=params.query,
                location=Location(lat=origin.lat, lng=origin.lng),
                radius=params.radius,
                execution_time=int((time.perf_counter() - started) * 1000),
            ),
        )

    def _log_search(self, params: SearchRequest, origin: Coordinate, results: int) -> None:
        """Analytics write. Never fails the search."""
        try:
            self._store.record_search(params.query, origin.lat, origin.lng, params.radius, results)
        except Exception as e:
            logger.warning(f"Could not record search {params.query!r}: {e}")

    # ── Private: detail ────────────────────────────────────────────────────────

    def _run_detail(self, product_id: str, lat: Optional[float], lng: Optional[float]) -> ProductItem:
        product = self._store.get_product(product_id)
        if product is None:
            raise ProductNotFound(f"Product id={product_id} not found")
        distance = None
        if lat is not None and lng is not None:
            distance = haversine_km(lat, lng, product.merchant.latitude, product.merchant.longitude)
        return self._orm_to_item(product, distance)

    # ── Private: Converters ────────────────────────────────────────────────────

    @staticmethod
    def total_stock(product: Product) -> int:
        return sum(v.inventory.quantity for v in product.variations if v.inventory is not None)

    @classmethod
    def _orm_to_item(cls, product: Product, distance: Optional[float]) -> ProductItem:
        merchant = product.merchant
        now = datetime.now(timezone.utc)
        return ProductItem(
            id=product.id,
            name=product.name,
            description=product.description or None,
            category=product.category or None,
            image_url=product.image_url or None,
            base_price=float(product.base_price) if product.base_price is not None else None,
            merchant=MerchantInfo(
                id=merchant.id,
                name=merchant.name,
                address=MerchantAddress(**(merchant.address or {})),
                latitude=merchant.latitude,
                longitude=merchant.longitude,
                distance=round_distance(distance) if distance is not None else None,
            ),
            variations=[
                VariationItem(
                    id=v.id,
                    name=v.name,
                    price=float(v.price or 0),
                    attributes=v.attributes or {},
                    inventory=InventoryInfo(
                        quantity=v.inventory.quantity if v.inventory else 0,
                        last_updated=v.inventory.last_sync_at if v.inventory else now,
                    ),
                )
                for v in product.variations
            ],
            total_stock=cls.total_stock(product),
        )
