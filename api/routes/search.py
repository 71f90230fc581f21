"""routes/search.py – GET /api/search, GET /api/search/suggestions"""
import logging
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import ValidationError

from ..deps import get_search_handler, get_suggest_handler
from ..errors import error_response, field_errors
from ..models import ErrorResponse, SearchResponse, SuggestionsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(
    query:    Optional[str] = Query(default=None, description="Text to match (1-100 chars)"),
    lat:      Optional[str] = Query(default=None, description="Latitude; default market location if omitted"),
    lng:      Optional[str] = Query(default=None, description="Longitude; default market location if omitted"),
    radius:   Optional[str] = Query(default=None, description="km, 1-50 (default 10)"),
    limit:    Optional[str] = Query(default=None, description="1-100 (default 20)"),
    category: Optional[str] = Query(default=None),
    in_stock: Optional[str] = Query(default=None, alias="inStock", description="default true"),
):
    """
    Products matching `query` whose merchant is within `radius` km,
    ordered by **distance**, then **stock** (desc), then **name**.
    """
    raw = {
        "query": query, "lat": lat, "lng": lng, "radius": radius,
        "limit": limit, "category": category, "inStock": in_stock,
    }
    try:
        return await get_search_handler().handle(raw)
    except ValidationError as e:
        return error_response(400, "INVALID_PARAMS", "Invalid search parameters", field_errors(e))
    except Exception:
        logger.exception("Search API error")
        return error_response(500, "SEARCH_ERROR", "Failed to search products")


@router.get(
    "/search/suggestions",
    response_model=SuggestionsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def suggestions(
    query: Optional[str] = Query(default=None, description="Partial query (max 50 chars)"),
    limit: Optional[str] = Query(default=None, description="1-10 (default 5)"),
):
    try:
        return await get_suggest_handler().handle({"query": query, "limit": limit})
    except ValidationError as e:
        return error_response(400, "INVALID_PARAMS", "Invalid parameters", field_errors(e))
    except Exception:
        logger.exception("Suggestions API error")
        return error_response(500, "SUGGESTIONS_ERROR", "Failed to get suggestions")
