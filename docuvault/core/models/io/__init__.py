"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between the API and its clients.
"""

from .common import ApiResponse, CountRead, ErrorResponse, PageParams, PaginationMeta, ok

__all__ = [
    "ApiResponse",
    "CountRead",
    "ErrorResponse",
    "PageParams",
    "PaginationMeta",
    "ok",
]
