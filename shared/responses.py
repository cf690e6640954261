"""Response envelopes shared by the storefront routers.

Successful calls answer ``{"success": true, "data": ...}``; paginated
listings nest the page under ``data`` next to a ``pagination`` block.
Errors are rendered by the handlers in ``main.py``.
"""
import math
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Money stays a Decimal in Python and goes out as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        )


class Page(BaseModel, Generic[T]):
    data: List[T]
    pagination: Pagination


class ErrorBody(BaseModel):
    message: str
    code: str
    details: Optional[dict] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody
