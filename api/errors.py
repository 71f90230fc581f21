"""
errors.py – error taxonomy + JSON error body helpers.

Every failing endpoint answers `{"error": {"code", "message", "details"?}}`.
"""
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import ValidationError


class ProductNotFound(LookupError):
    """Product id does not resolve to a catalog row."""


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic errors per top-level field: {"radius": ["Input should be ..."]}."""
    grouped: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        grouped.setdefault(field, []).append(err["msg"])
    return grouped
