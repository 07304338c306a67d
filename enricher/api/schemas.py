"""Pydantic request/response schemas for the article REST API.

Every response uses the same envelope::

    {"success": true, "data": ..., "pagination": {...}, "message": "..."}

``pagination`` appears only on list responses and ``message`` only where
there is something to say.  Field names on the wire are camelCase.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from enricher.models.article import TITLE_MAX_LENGTH, Reference


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleCreateRequest(_CamelModel):
    """Body of ``POST /articles``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1)
    author: str = "Unknown Author"
    published_date: datetime | None = None
    source_url: str = Field(min_length=1)
    image_url: str | None = None


class ArticleUpdateRequest(_CamelModel):
    """Body of ``PUT /articles/{id}``.  Only the fields sent are changed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str | None = Field(default=None, min_length=1)
    author: str | None = None
    published_date: datetime | None = None
    source_url: str | None = Field(default=None, min_length=1)
    image_url: str | None = None
    is_updated: bool | None = None
    updated_content: str | None = None
    references: list[Reference] | None = None
    last_updated: datetime | None = None


class Pagination(_CamelModel):
    current_page: int
    total_pages: int
    total_articles: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Pagination:
        total_pages = -(-total // limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_articles=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ApiResponse(_CamelModel):
    """The response envelope shared by every endpoint."""

    success: bool = True
    data: Any = None
    pagination: Pagination | None = None
    message: str | None = None


class ErrorResponse(_CamelModel):
    """Envelope returned for 4xx/5xx responses."""

    success: bool = False
    message: str
    errors: list[str] | None = None
