"""Limit/offset pagination shared by list endpoints."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class PaginationParams:
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0


def get_pagination_params(
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> PaginationParams:
    """FastAPI dependency for pagination params."""
    return PaginationParams(limit=limit, offset=offset)


class Page(BaseModel, Generic[T]):
    """One slice of an ordered listing."""

    items: list[T]
    total: int
    limit: int
    offset: int
    has_more: bool


def build_page(items: Sequence[T], total: int, params: PaginationParams) -> Page[T]:
    return Page(
        items=list(items),
        total=total,
        limit=params.limit,
        offset=params.offset,
        has_more=params.offset + len(items) < total,
    )
