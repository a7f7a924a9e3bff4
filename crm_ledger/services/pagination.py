"""Page bookkeeping shared by the listing services."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from crm_ledger.core.config import get_config
from crm_ledger.core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total / self.page_size) if self.total else 0


def page_request(page: int | None, page_size: int | None) -> PageRequest:
    """Validate 1-based page numbers against configured limits."""
    cfg = get_config()
    page = 1 if page is None else page
    page_size = cfg.DEFAULT_PAGE_SIZE if page_size is None else page_size
    if page < 1:
        raise ValidationError("page must be >= 1.")
    if page_size < 1 or page_size > cfg.MAX_PAGE_SIZE:
        raise ValidationError(f"page size must be between 1 and {cfg.MAX_PAGE_SIZE}.")
    return PageRequest(page=page, page_size=page_size)
