# src/clubrank/schemas/pagination.py

"""Paging and ordering models shared by the list endpoints."""

from collections.abc import Sequence
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def apply(self, column: Any) -> Any:
        """Return ``column`` as an ORDER BY term in this direction."""
        return column.desc() if self is SortOrder.DESC else column.asc()


class PlayerSortField(str, Enum):
    ID = "id"
    NAME = "name"
    RATING = "rating"
    CREATED_AT = "created_at"


class MatchSortField(str, Enum):
    ID = "id"
    RECORDED_AT = "recorded_at"


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a filtered listing."""

    items: list[T]
    total: int = Field(..., description="Rows matching the filters")
    skip: int = Field(..., description="Offset of this page")
    limit: int = Field(..., description="Page size requested")
    has_more: bool = Field(..., description="Rows remain after this page")

    @classmethod
    def from_page(
        cls, items: Sequence[Any], total: int, skip: int, limit: int
    ) -> "PaginatedResponse[T]":
        return cls(
            items=list(items),
            total=total,
            skip=skip,
            limit=limit,
            has_more=skip + len(items) < total,
        )
