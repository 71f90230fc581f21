"""
core/sync.py – CatalogSync class.
Responsibility: upsert Square data into the catalog by natural key
(location id, item id, variation id, product+variation pair).

One sync call = one session = one transaction.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy.orm import Session

from ..db.catalog import CatalogStore
from ..db.models import Inventory, Merchant, Product, ProductVariation
from .square import CatalogSnapshot, parse_quantity

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    merchant_id: str
    merchant_name: str
    products: int
    variations: int
    inventory: int


class CatalogSync:
    """Writes Square snapshots and webhook counts into the catalog store."""

    def __init__(self, store: CatalogStore) -> None:
        self._store = store

    # ── Public ─────────────────────────────────────────────────────────────────

    def apply_snapshot(self, snapshot: CatalogSnapshot) -> SyncResult:
        """Full resync of one location."""
        counts = {c.variation_id: c.quantity for c in snapshot.inventory}
        n_products = n_variations = n_inventory = 0

        with self._store.session() as session:
            merchant = self._upsert_merchant(session, snapshot.location)

            for sq_product in snapshot.products:
                product = self._upsert(session, Product, square_item_id=sq_product.id)
                if product.merchant_id is None:
                    product.merchant_id = merchant.id
                product.name        = sq_product.name
                product.description = sq_product.description
                product.category    = sq_product.category
                product.is_active   = True
                session.flush()
                n_products += 1

                for sq_variation in sq_product.variations:
                    variation = self._upsert(session, ProductVariation, square_variation_id=sq_variation.id)
                    if variation.product_id is None:
                        variation.product_id = product.id
                        variation.attributes = {}
                    variation.name      = sq_variation.name
                    variation.price     = sq_variation.price
                    variation.sku       = sq_variation.sku
                    variation.is_active = True
                    session.flush()
                    n_variations += 1

                    if sq_variation.id in counts:
                        self._upsert_inventory(session, variation.product_id, variation.id, counts[sq_variation.id])
                        n_inventory += 1

            result = SyncResult(merchant.id, merchant.name, n_products, n_variations, n_inventory)

        logger.info("[Sync] %s: %d products, %d variations, %d inventory",
                    result.merchant_name, n_products, n_variations, n_inventory)
        return result

    def apply_inventory_counts(self, counts: Iterable[dict[str, Any]]) -> int:
        """Incremental update from an inventory webhook. Unknown variations are skipped."""
        updated = 0
        with self._store.session() as session:
            for count in counts:
                variation = (
                    session.query(ProductVariation)
                    .filter(ProductVariation.square_variation_id == count.get("catalog_object_id"))
                    .one_or_none()
                )
                if variation is None:
                    continue
                quantity = parse_quantity(count.get("quantity"))
                self._upsert_inventory(session, variation.product_id, variation.id, quantity)
                logger.info(f"Updated inventory for {variation.name}: {quantity}")
                updated += 1
        return updated

    # ── Private ────────────────────────────────────────────────────────────────

    def _upsert_merchant(self, session: Session, location: dict[str, Any]) -> Merchant:
        address = location.get("address") or {}
        coords  = location.get("coordinates") or {}
        merchant = self._upsert(session, Merchant, square_merchant_id=location["id"])
        merchant.name      = location.get("name") or "Unnamed Store"
        merchant.email     = location.get("business_email")
        merchant.phone     = location.get("phone_number")
        merchant.address   = {
            "street":   address.get("address_line_1") or "",
            "city":     address.get("locality") or "",
            "state":    address.get("administrative_district_level_1") or "",
            "postcode": address.get("postal_code") or "",
            "country":  address.get("country") or "AU",
        }
        merchant.latitude  = coords.get("latitude") or 0
        merchant.longitude = coords.get("longitude") or 0
        merchant.is_active = location.get("status") == "ACTIVE"
        session.flush()
        return merchant

    @staticmethod
    def _upsert(session: Session, model, **natural_key):
        row = session.query(model).filter_by(**natural_key).one_or_none()
        if row is None:
            row = model(**natural_key)
            session.add(row)
        return row

    @staticmethod
    def _upsert_inventory(session: Session, product_id: str, variation_id: str, quantity: int) -> None:
        row = (
            session.query(Inventory)
            .filter_by(product_id=product_id, variation_id=variation_id)
            .one_or_none()
        )
        if row is None:
            row = Inventory(product_id=product_id, variation_id=variation_id)
            session.add(row)
        row.quantity     = quantity
        row.last_sync_at = datetime.now(timezone.utc)
