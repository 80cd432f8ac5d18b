# servicedesk/backend/app/schemas/common.py

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict

from ..models.enums import Role

T = TypeVar("T")


class Performer(BaseModel):
    """Identity of whoever invokes an operation, supplied by the caller."""

    id: int
    role: Role

    model_config = ConfigDict(frozen=True)


class PagedResult(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    page_size: int


def clamp_paging(page, page_size, default_size: int, max_size: int):
    """page >= 1, page_size within [1, max_size]."""
    page = max(1, page or 1)
    if page_size is None:
        page_size = default_size
    page_size = min(max(1, page_size), max_size)
    return page, page_size


def is_ascending(sort_dir) -> bool:
    return (sort_dir or "desc").strip().lower() == "asc"
