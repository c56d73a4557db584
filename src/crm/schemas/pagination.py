"""Pagination schemas for page/size listings."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PagedResponse(BaseModel, Generic[T]):
    """One page of an offset-paginated listing.

    ``total`` counts every row matching the filters, so clients can render
    page controls without a second request.
    """

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(ge=1)
    page_size: int = Field(serialization_alias="pageSize")
    total: int = Field(ge=0)
    rows: list[T]


def clamp_page(page: int, page_size: int, min_size: int, max_size: int) -> tuple[int, int]:
    """Normalize listing parameters instead of rejecting them.

    Pages start at 1; page size is clamped into ``[min_size, max_size]``.
    """
    return max(1, page), min(max_size, max(min_size, page_size))
