# gstkit/api/v1/envelope.py
"""
Response envelope used by every v1 endpoint.

    {
        "status": "ok" | "error",
        "data": <payload>,
        "message": <optional string>,
        "errors": <optional list of {"field", "message"} dicts>
    }

Payloads are dumped in JSON mode so amounts leave as plain numbers and
dates as ISO strings.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    status: str = "ok"
    data: T | None = None
    message: str | None = None
    errors: list[dict[str, Any]] | None = None


class PaginatedData(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
    has_more: bool


class PaginationParams(BaseModel):
    """Query parameters for list endpoints (use as Depends)."""

    limit: int = Field(default=20, ge=1, le=100, description="Items per page")
    offset: int = Field(default=0, ge=0, description="Number of items to skip")


def ok(data: Any = None, message: str | None = None) -> dict:
    return ApiResponse(status="ok", data=data, message=message).model_dump(mode="json")


def error(message: str, errors: list[dict[str, Any]] | None = None, status: str = "error") -> dict:
    return ApiResponse(status=status, message=message, errors=errors).model_dump(mode="json")


def paginated(items: list, limit: int, offset: int) -> dict:
    """Slice ``items`` to one page and wrap it with the paging metadata."""
    total = len(items)
    page = PaginatedData(
        items=items[offset:offset + limit],
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total,
    )
    return ApiResponse(status="ok", data=page).model_dump(mode="json")
