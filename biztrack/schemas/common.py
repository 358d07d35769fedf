"""
BizTrack Common Schemas
Shared Pydantic models for common API structures
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
import math


class Pagination(BaseModel):
    """Pagination block returned alongside list data"""
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Number of items per page")
    total: int = Field(..., description="Total number of items across all pages")
    pages: int = Field(..., description="Total number of pages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class ErrorResponse(BaseModel):
    """
    Standard error response model

    Used for all API error responses
    """
    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Application-specific error code")
    details: Optional[Any] = Field(None, description="Additional error details")


class MessageResponse(BaseModel):
    """Operations that only report what they did"""
    message: str
    data: Optional[Dict[str, Any]] = None


class CountResponse(BaseModel):
    count: int


class BulkResult(BaseModel):
    message: str
    updated_count: int = 0
    deleted_count: int = 0


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


__all__: List[str] = [
    "Pagination", "ErrorResponse", "MessageResponse", "CountResponse",
    "BulkResult", "page_offset",
]
