"""
Shared response envelope and pagination models.

Every successful API response is wrapped in ``ApiResponse``; list endpoints
carry a ``PaginationMeta`` next to their items.
"""

from __future__ import annotations

import math
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, StringConstraints

DataT = TypeVar("DataT")

# surrounding whitespace is dropped before the length check
DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
ShortName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope."""

    success: bool = True
    message: str = "OK"
    data: Optional[DataT] = None


class ErrorResponse(BaseModel):
    """Error envelope rendered by the domain error handler."""

    success: bool = False
    message: str
    code: str


class PaginationMeta(BaseModel):
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class PageParams(BaseModel):
    """Resolved ``page``/``limit`` query parameters."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class CountRead(BaseModel):
    count: int


def ok(data=None, message: str = "OK") -> ApiResponse:
    """Wrap ``data`` in the success envelope."""
    return ApiResponse(success=True, message=message, data=data)
