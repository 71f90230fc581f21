"""
api/db/models.py – SQLAlchemy ORM models for the catalog.

Merchant → Product → ProductVariation → Inventory, plus the append-only
search_logs table. Catalog rows are written only by the POS sync
(api/core/sync.py); the search path reads them.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, Numeric, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Merchant(Base):
    __tablename__ = "merchants"

    id                 = Column(String(32), primary_key=True, default=_new_id)
    square_merchant_id = Column(String(64), unique=True, nullable=True)
    name               = Column(String(255), nullable=False)
    email              = Column(String(255), nullable=True)
    phone              = Column(String(64),  nullable=True)
    address            = Column(JSON, nullable=False, default=dict)   # street/city/state/postcode/country
    latitude           = Column(Float, nullable=False)
    longitude          = Column(Float, nullable=False)
    is_active          = Column(Boolean, nullable=False, default=True)
    created_at         = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at         = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    products = relationship("Product", back_populates="merchant")

    def __repr__(self) -> str:
        return f"<Merchant id={self.id} name={self.name!r}>"


class Product(Base):
    __tablename__ = "products"

    id             = Column(String(32), primary_key=True, default=_new_id)
    square_item_id = Column(String(64), unique=True, nullable=True)
    merchant_id    = Column(String(32), ForeignKey("merchants.id"), nullable=False, index=True)
    name           = Column(String(255), nullable=False)
    description    = Column(Text, nullable=True)
    category       = Column(String(255), nullable=True)
    image_url      = Column(Text, nullable=True)
    base_price     = Column(Numeric(10, 2), nullable=True)
    is_active      = Column(Boolean, nullable=False, default=True)
    created_at     = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at     = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    merchant   = relationship("Merchant", back_populates="products")
    variations = relationship("ProductVariation", back_populates="product")

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"


class ProductVariation(Base):
    __tablename__ = "product_variations"

    id                  = Column(String(32), primary_key=True, default=_new_id)
    square_variation_id = Column(String(64), unique=True, nullable=True)
    product_id          = Column(String(32), ForeignKey("products.id"), nullable=False, index=True)
    name                = Column(String(255), nullable=False)
    price               = Column(Numeric(10, 2), nullable=False, default=0)
    sku                 = Column(String(128), nullable=True)
    attributes          = Column(JSON, nullable=False, default=dict)   # size / color / ...
    is_active           = Column(Boolean, nullable=False, default=True)
    created_at          = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at          = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    product   = relationship("Product", back_populates="variations")
    inventory = relationship("Inventory", back_populates="variation", uselist=False)

    def __repr__(self) -> str:
        return f"<ProductVariation id={self.id} name={self.name!r}>"


class Inventory(Base):
    __tablename__ = "inventory"
    __table_args__ = (UniqueConstraint("product_id", "variation_id", name="uq_inventory_product_variation"),)

    id           = Column(Integer, primary_key=True, autoincrement=True)
    product_id   = Column(String(32), ForeignKey("products.id"), nullable=False)
    variation_id = Column(String(32), ForeignKey("product_variations.id"), nullable=False)
    quantity     = Column(Integer, nullable=False, default=0)
    last_sync_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    variation = relationship("ProductVariation", back_populates="inventory")

    def __repr__(self) -> str:
        return f"<Inventory variation_id={self.variation_id} quantity={self.quantity}>"


class SearchLog(Base):
    """One row per executed search. Analytics only, never read by the search path."""
    __tablename__ = "search_logs"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    query      = Column(String(255), nullable=False)
    latitude   = Column(Float, nullable=True)
    longitude  = Column(Float, nullable=True)
    radius     = Column(Float, nullable=True)
    results    = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
