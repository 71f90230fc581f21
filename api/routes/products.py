"""routes/products.py – GET /api/products/{product_id}"""
import logging
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import ValidationError

from ..deps import get_search_handler
from ..errors import ProductNotFound, error_response, field_errors
from ..models import ErrorResponse, ProductDetailResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Products"])


@router.get(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def product_detail(
    product_id: str,
    lat: Optional[str] = Query(default=None),
    lng: Optional[str] = Query(default=None),
):
    """Full product detail; merchant `distance` is filled only when both `lat` and `lng` are sent."""
    try:
        return await get_search_handler().handle_detail({"productId": product_id, "lat": lat, "lng": lng})
    except ValidationError as e:
        return error_response(400, "INVALID_PARAMS", "Invalid parameters", field_errors(e))
    except ProductNotFound:
        return error_response(404, "PRODUCT_NOT_FOUND", "Product not found")
    except Exception:
        logger.exception("Product API error")
        return error_response(500, "PRODUCT_ERROR", "Failed to retrieve product")
