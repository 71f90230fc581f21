"""
handlers/suggest_handler.py – SuggestHandler class.
Responsibility: autocomplete suggestions from a fixed vocabulary.
"""
from typing import Any, Optional

from ..models import SuggestionsRequest, SuggestionsResponse

SUGGESTION_VOCABULARY: tuple[str, ...] = (
    "hoodie",
    "t-shirt",
    "jacket",
    "jeans",
    "sneakers",
    "dress",
    "shirt",
    "sweater",
    "pants",
    "shoes",
)


def generate_suggestions(query: str, limit: int) -> list[str]:
    """Vocabulary entries containing `query` (case-insensitive), at most `limit`."""
    if not query:
        return list(SUGGESTION_VOCABULARY[:limit])
    needle = query.lower()
    return [s for s in SUGGESTION_VOCABULARY if needle in s.lower()][:limit]


class SuggestHandler:
    """Handles /api/search/suggestions."""

    async def handle(self, raw: dict[str, Optional[Any]]) -> SuggestionsResponse:
        req = SuggestionsRequest.model_validate({k: v for k, v in raw.items() if v is not None})
        return SuggestionsResponse(suggestions=generate_suggestions(req.query, req.limit))
