"""Persistence adapter: primary store with a direct-write fallback.

Enrichment results go to the primary store (the REST API) first.  If that
raises or does not know the article, the same write is attempted against the
fallback store (the database behind the API).  Only when both fail does the
commit fail.  Reads of the work queue follow the same order.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from enricher.interfaces.article_store import IArticleStore
from enricher.models.article import Article, ArticleStats, Reference
from enricher.utils.errors import PersistenceError
from enricher.utils.logging import get_logger


class PersistenceAdapter:
    """Writes enrichment results through a primary store, then a fallback.

    Parameters
    ----------
    primary:
        The preferred store.
    fallback:
        Used when the primary fails.  ``None`` means there is no second
        chance.
    """

    def __init__(self, primary: IArticleStore, fallback: IArticleStore | None = None) -> None:
        self._primary = primary
        self._fallback = fallback
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def list_unprocessed(self, limit: int | None = None) -> list[Article]:
        """Return unprocessed articles from the primary store, else the fallback."""
        try:
            return await self._primary.list_unprocessed(limit)
        except Exception as exc:
            if self._fallback is None:
                raise
            self._logger.warning(
                "primary_store_list_failed",
                store=self._primary.get_provider_name(),
                fallback=self._fallback.get_provider_name(),
                error=str(exc),
            )
            return await self._fallback.list_unprocessed(limit)

    async def commit_update(
        self,
        article_id: str,
        updated_content: str,
        references: list[Reference],
        timestamp: datetime,
    ) -> Article:
        """Persist one enrichment result.

        Raises
        ------
        PersistenceError
            If neither store accepted the write.
        """
        errors: list[str] = []
        for store in (self._primary, self._fallback):
            if store is None:
                continue
            name = store.get_provider_name()
            try:
                article = await store.commit_update(article_id, updated_content, references, timestamp)
            except Exception as exc:  # noqa: BLE001 - any store failure moves on to the next store
                self._logger.warning("store_commit_failed", store=name, article_id=article_id, error=str(exc))
                errors.append(f"{name}: {exc}")
                continue
            if article is None:
                self._logger.warning("store_commit_not_found", store=name, article_id=article_id)
                errors.append(f"{name}: article not found")
                continue
            self._logger.info("article_persisted", store=name, article_id=article_id)
            return article

        raise PersistenceError(message=f"Could not persist article {article_id}: {'; '.join(errors)}")

    async def stats(self) -> ArticleStats:
        """Return enrichment progress from the primary store, else the fallback."""
        try:
            return await self._primary.stats()
        except Exception as exc:
            if self._fallback is None:
                raise
            self._logger.warning("primary_store_stats_failed", error=str(exc))
            return await self._fallback.stats()

    async def close(self) -> None:
        """Close any store that holds network connections."""
        for store in (self._primary, self._fallback):
            close = getattr(store, "close", None)
            if close is not None:
                await close()
