"""Article and Reference models.

An Article is the unit the pipeline enriches.  Its original fields come from
the record store; ``updated_content`` and ``references`` are written exactly
once, by a successful synthesis, together with ``is_updated=True``.

The JSON form uses camelCase (``isUpdated``, ``updatedContent``,
``sourceUrl``...) because that is what the article REST API speaks; Python
code uses the snake_case attribute names.  ``populate_by_name`` lets both
spellings construct a model.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 500


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def new_article_id() -> str:
    return uuid4().hex


class Reference(BaseModel):
    """An external article cited as input to a synthesis (title + URL only)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    url: str

    @field_validator("title", "url")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("url")
    @classmethod
    def _url_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Reference URL is required")
        return value


class Article(BaseModel):
    """A stored article, before or after enrichment.

    Immutable; use ``model_copy(update={...})`` to derive a new version.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_article_id)
    # Original article data.
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    content: str
    author: str = "Unknown Author"
    published_date: datetime = Field(default_factory=utc_now)
    source_url: str
    image_url: str | None = None
    # Enrichment output.
    is_updated: bool = False
    updated_content: str | None = None
    references: list[Reference] = Field(default_factory=list)
    # Bookkeeping.
    scraped_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("title", "source_url", "author", mode="before")
    @classmethod
    def _trim(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Article title is required")
        return value

    @field_validator("content")
    @classmethod
    def _content_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Article content is required")
        return value

    @field_validator("source_url")
    @classmethod
    def _source_url_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Source URL is required")
        return value

    @model_validator(mode="after")
    def _enrichment_is_all_or_nothing(self) -> Article:
        has_output = bool(self.updated_content and self.updated_content.strip()) and bool(self.references)
        if self.is_updated != has_output:
            raise ValueError(
                "isUpdated must be true exactly when updatedContent and references are both present"
            )
        return self


class ArticleStats(BaseModel):
    """Enrichment progress across the whole record store."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    updated: int = 0
    not_updated: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def update_percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.updated / self.total * 100, 2)
