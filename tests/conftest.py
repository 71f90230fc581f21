"""tests/conftest.py – shared fixtures for all tests."""
from datetime import datetime, timezone
from typing import Optional

import pytest

from api.core.geo import DEFAULT_LOCATION, EARTH_RADIUS_KM
from api.db.models import Inventory, Merchant, Product, ProductVariation

KM_PER_DEGREE = EARTH_RADIUS_KM * 3.141592653589793 / 180
SYNC_TIME = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def north_of_origin(km: float) -> tuple[float, float]:
    """Point `km` due north of the default location (haversine along a meridian is exact)."""
    return DEFAULT_LOCATION.lat + km / KM_PER_DEGREE, DEFAULT_LOCATION.lng


def make_merchant(id="m1", name="Byron Threads", km=1.0, is_active=True, **kw) -> Merchant:
    lat, lng = north_of_origin(km)
    defaults = dict(
        id=id, name=name, latitude=lat, longitude=lng, is_active=is_active,
        address={"street": "1 Jonson St", "city": "Byron Bay", "state": "NSW",
                 "postcode": "2481", "country": "AU"},
    )
    defaults.update(kw)
    return Merchant(**defaults)


def make_product(
    id: str,
    name: str,
    merchant: Merchant,
    quantities: tuple[Optional[int], ...] = (5,),
    category: Optional[str] = "Clothing",
    description: Optional[str] = None,
    is_active: bool = True,
) -> Product:
    """Transient Product; one variation per entry in `quantities` (None = no inventory row)."""
    product = Product(
        id=id, name=name, category=category, description=description,
        is_active=is_active, merchant=merchant, merchant_id=merchant.id,
    )
    for i, qty in enumerate(quantities):
        variation = ProductVariation(
            id=f"{id}-v{i}", name=f"Size {i}", price=49.95, attributes={"size": str(i)},
            product_id=id,
        )
        if qty is not None:
            variation.inventory = Inventory(product_id=id, variation_id=variation.id, quantity=qty, last_sync_at=SYNC_TIME)
        product.variations.append(variation)
    return product


class InMemoryCatalog:
    """Stand-in for CatalogStore: same read/write surface, plain lists inside."""

    def __init__(self, products: list[Product], fail_on_log: bool = False) -> None:
        self.products = products
        self.fail_on_log = fail_on_log
        self.logs: list[dict] = []
        self.takes: list[int] = []

    def find_candidates(self, query: str, category: Optional[str], take: int) -> list[Product]:
        self.takes.append(take)
        needle = query.lower()

        def matches(p: Product) -> bool:
            text_hit = any(needle in (f or "").lower() for f in (p.name, p.description, p.category))
            cat_hit = not category or category.lower() in (p.category or "").lower()
            return text_hit and cat_hit

        rows = [p for p in self.products if p.is_active and p.merchant.is_active and matches(p)]
        return rows[:take]

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def record_search(self, query, latitude, longitude, radius, results) -> None:
        if self.fail_on_log:
            raise RuntimeError("analytics table locked")
        self.logs.append(dict(query=query, latitude=latitude, longitude=longitude, radius=radius, results=results))


@pytest.fixture
def sample_products() -> list[Product]:
    near = make_merchant(id="m-near", name="Byron Threads", km=2.0)
    far  = make_merchant(id="m-far", name="Lismore Outfitters", km=30.0)
    return [
        make_product("p-hoodie", "Black Hoodie", near, quantities=(3, 4), category="Hoodies"),
        make_product("p-tee", "White T-Shirt", near, quantities=(10,), category="Tops"),
        make_product("p-far-hoodie", "Grey Hoodie", far, quantities=(8,), category="Hoodies"),
    ]


@pytest.fixture
def catalog(sample_products) -> InMemoryCatalog:
    return InMemoryCatalog(sample_products)


# ── SQLite-backed store ────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def clear_engine_cache():
    """Drop cached SQLAlchemy engines so every test gets its own database file."""
    from api.db import session as sess_module
    sess_module._engines.clear()
    sess_module._session_factories.clear()
    yield
    for engine in sess_module._engines.values():
        engine.dispose()
    sess_module._engines.clear()
    sess_module._session_factories.clear()


@pytest.fixture
def sqlite_store(tmp_path):
    from api.db.catalog import CatalogStore
    store = CatalogStore(f"sqlite:///{tmp_path / 'catalog.db'}")
    store.create_tables()
    return store
