"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from campus_share.services.listing import Page


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


class Pagination(CamelModel):
    """Pagination envelope returned alongside list results."""

    current_page: int = Field(..., description="1-indexed page number")
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_page(cls, page: Page) -> Pagination:
        return cls(
            current_page=page.current_page,
            total_pages=page.total_pages,
            total_items=page.total_items,
            items_per_page=page.items_per_page,
            has_next_page=page.has_next_page,
            has_prev_page=page.has_prev_page,
        )
