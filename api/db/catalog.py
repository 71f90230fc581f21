"""
api/db/catalog.py – CatalogStore class.
Responsibility: every SQL read/write the search path and the POS sync need.

Objects returned to callers are fully loaded (merchant, variations, inventory)
so they can be used after the session is closed.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from .models import Merchant, Product, ProductVariation, SearchLog
from .session import db_session, init_db

_LIKE_ESCAPE = "\\"


def _contains(term: str) -> str:
    """LIKE pattern matching `term` literally anywhere in the column."""
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
            .replace("%", _LIKE_ESCAPE + "%")
            .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class CatalogStore:
    """SQLAlchemy-backed catalog (merchants, products, variations, inventory)."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url

    # ── Lifecycle ──────────────────────────────────────────────────────────────

    def create_tables(self) -> None:
        init_db(self._database_url)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        with db_session(self._database_url) as session:
            yield session

    # ── Reads ──────────────────────────────────────────────────────────────────

    def find_candidates(self, query: str, category: Optional[str], take: int) -> list[Product]:
        """Active products of active merchants whose name/description/category contains `query`."""
        like = _contains(query)
        with self.session() as session:
            q = (
                session.query(Product)
                .join(Product.merchant)
                .options(*self._load_options())
                .filter(Product.is_active.is_(True), Merchant.is_active.is_(True))
                .filter(or_(
                    Product.name.ilike(like, escape=_LIKE_ESCAPE),
                    Product.description.ilike(like, escape=_LIKE_ESCAPE),
                    Product.category.ilike(like, escape=_LIKE_ESCAPE),
                ))
            )
            if category:
                q = q.filter(Product.category.ilike(_contains(category), escape=_LIKE_ESCAPE))
            return q.order_by(Product.name).limit(take).all()

    def get_product(self, product_id: str) -> Optional[Product]:
        with self.session() as session:
            return (
                session.query(Product)
                .options(*self._load_options())
                .filter(Product.id == product_id)
                .one_or_none()
            )

    # ── Writes ─────────────────────────────────────────────────────────────────

    def record_search(
        self,
        query: str,
        latitude: Optional[float],
        longitude: Optional[float],
        radius: Optional[float],
        results: int,
    ) -> None:
        with self.session() as session:
            session.add(SearchLog(
                query=query, latitude=latitude, longitude=longitude, radius=radius, results=results,
            ))

    # ── Private ────────────────────────────────────────────────────────────────

    @staticmethod
    def _load_options() -> tuple:
        return (
            joinedload(Product.merchant),
            selectinload(Product.variations).joinedload(ProductVariation.inventory),
        )
