"""
models.py – Pydantic schemas for request/response.
Wire format is camelCase; Python attributes stay snake_case.
"""
from datetime import datetime
from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Request Models ─────────────────────────────────────────────────────────────

class SearchRequest(CamelModel):
    query:    str             = Field(..., min_length=1, max_length=100, description="Free-text product query")
    lat:      Optional[float] = Field(default=None, ge=-90,  le=90)
    lng:      Optional[float] = Field(default=None, ge=-180, le=180)
    radius:   float           = Field(default=10, ge=1, le=50, description="Search radius (km)")
    limit:    int             = Field(default=20, ge=1, le=100)
    category: Optional[str]   = Field(default=None, description="Category substring filter")
    in_stock: bool            = Field(default=True, description="Only products with stock > 0")


class SuggestionsRequest(CamelModel):
    query: str = Field(default="", max_length=50)
    limit: int = Field(default=5, ge=1, le=10)


class ProductDetailRequest(CamelModel):
    product_id: str             = Field(..., min_length=1)
    lat:        Optional[float] = Field(default=None, ge=-90,  le=90)
    lng:        Optional[float] = Field(default=None, ge=-180, le=180)


class SyncRequest(CamelModel):
    location_id: str = Field(..., min_length=1, description="Square location id")


# ── Response Models ────────────────────────────────────────────────────────────

class MerchantAddress(CamelModel):
    street:   str = ""
    city:     str = ""
    state:    str = ""
    postcode: str = ""
    country:  str = ""


class MerchantInfo(CamelModel):
    id:        str
    name:      str
    address:   MerchantAddress
    latitude:  float
    longitude: float
    distance:  Optional[float] = Field(default=None, description="km, rounded to 0.1")


class InventoryInfo(CamelModel):
    quantity:     int
    last_updated: datetime


class VariationItem(CamelModel):
    id:         str
    name:       str
    price:      float
    attributes: dict[str, Any] = {}
    inventory:  InventoryInfo


class ProductItem(CamelModel):
    id:          str
    name:        str
    description: Optional[str]   = None
    category:    Optional[str]   = None
    image_url:   Optional[str]   = None
    base_price:  Optional[float] = None
    merchant:    MerchantInfo
    variations:  List[VariationItem] = []
    total_stock: int


class Pagination(CamelModel):
    total:    int
    page:     int = 1
    limit:    int
    has_more: bool = False


class Location(CamelModel):
    lat: float
    lng: float


class SearchMeta(CamelModel):
    query:          str
    location:       Location
    radius:         float
    execution_time: int = Field(description="Wall-clock milliseconds")


class SearchResponse(CamelModel):
    products:    List[ProductItem]
    pagination:  Pagination
    search_meta: SearchMeta


class SuggestionsResponse(CamelModel):
    suggestions: List[str]


class ProductDetailResponse(CamelModel):
    product: ProductItem


class MerchantRef(CamelModel):
    id:   str
    name: str


class SyncCounts(CamelModel):
    products:   int
    variations: int
    inventory:  int


class SyncResponse(CamelModel):
    merchant:  MerchantRef
    synced:    SyncCounts
    timestamp: datetime


class WebhookResponse(CamelModel):
    success: bool = True


class ErrorBody(CamelModel):
    code:    str
    message: str
    details: Optional[dict[str, Any]] = None


class ErrorResponse(CamelModel):
    error: ErrorBody
