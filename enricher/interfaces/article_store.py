"""Abstract base class for article record stores.

The pipeline reads unprocessed articles from a store and commits each
enrichment back as one atomic record update.  Two implementations exist:
the REST API client (the primary write path) and the SQLite database behind
that API (the direct-write fallback).  The CRUD methods back the REST API
itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from enricher.models.article import Article, ArticleStats, Reference


# Concrete implementations: HttpArticleStore, SQLiteArticleStore
# Located in: enricher/providers/store/
class IArticleStore(ABC):
    """Contract for persistent article storage."""

    @abstractmethod
    async def list_unprocessed(self, limit: int | None = None) -> list[Article]:
        """Return articles with ``is_updated == False``, oldest first."""

    @abstractmethod
    async def commit_update(
        self,
        article_id: str,
        updated_content: str,
        references: list[Reference],
        timestamp: datetime,
    ) -> Article | None:
        """Mark an article enriched in a single atomic write.

        Sets ``is_updated``, ``updated_content``, ``references`` and
        ``last_updated`` together.

        Returns
        -------
        Article or None
            The updated article, or ``None`` if *article_id* is unknown.

        Raises
        ------
        enricher.utils.errors.PersistenceError
            If the write itself fails.
        """

    @abstractmethod
    async def list_articles(
        self,
        page: int = 1,
        limit: int = 10,
        is_updated: bool | None = None,
    ) -> tuple[list[Article], int]:
        """Return one page of articles (newest first) and the total match count."""

    @abstractmethod
    async def get(self, article_id: str) -> Article | None:
        """Return the article with *article_id*, or ``None``."""

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Insert a new article and return it as stored."""

    @abstractmethod
    async def update(self, article_id: str, changes: dict[str, Any]) -> Article | None:
        """Apply a partial update (snake_case field names) and return the result.

        Raises ``ValueError`` if the updated article would be invalid.
        """

    @abstractmethod
    async def delete(self, article_id: str) -> bool:
        """Delete an article; return ``False`` if it did not exist."""

    @abstractmethod
    async def stats(self) -> ArticleStats:
        """Return enrichment progress counts."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"sqlite"``."""
