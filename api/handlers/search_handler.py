"""
handlers/search_handler.py – SearchHandler class.
Responsibility: validate raw query params and run the proximity search.
"""
from typing import Any, Optional

from ..core.search import SearchService
from ..models import ProductDetailRequest, ProductDetailResponse, SearchRequest, SearchResponse


def _present(raw: dict[str, Optional[Any]]) -> dict[str, Any]:
    """Drop absent params so model defaults apply."""
    return {k: v for k, v in raw.items() if v is not None}


class SearchHandler:
    """Handles /api/search and /api/products/{id}."""

    def __init__(self, search: SearchService) -> None:
        self._search = search

    async def handle(self, raw: dict[str, Optional[Any]]) -> SearchResponse:
        """Raises pydantic.ValidationError on bad params."""
        params = SearchRequest.model_validate(_present(raw))
        return await self._search.search(params)

    async def handle_detail(self, raw: dict[str, Optional[Any]]) -> ProductDetailResponse:
        req = ProductDetailRequest.model_validate(_present(raw))
        product = await self._search.product_detail(req.product_id, req.lat, req.lng)
        return ProductDetailResponse(product=product)
