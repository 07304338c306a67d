"""Unit tests for the primary/fallback PersistenceAdapter."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from enricher.interfaces.article_store import IArticleStore
from enricher.models.article import ArticleStats, Reference
from enricher.services.persistence import PersistenceAdapter
from enricher.utils.errors import PersistenceError

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)  # noqa: UP017
REFS = [Reference(title="A", url="https://a.com/x"), Reference(title="B", url="https://b.com/y")]


def _store(name: str) -> MagicMock:
    store = MagicMock(spec=IArticleStore)
    store.get_provider_name.return_value = name
    store.commit_update = AsyncMock()
    store.list_unprocessed = AsyncMock(return_value=[])
    store.stats = AsyncMock(return_value=ArticleStats())
    return store


class TestCommitUpdate:
    @pytest.mark.asyncio
    async def test_primary_success_skips_fallback(self, make_article) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        updated = make_article(is_updated=True, updated_content="New", references=REFS)
        primary.commit_update.return_value = updated

        result = await PersistenceAdapter(primary, fallback).commit_update("a1", "New", REFS, NOW)

        assert result is updated
        primary.commit_update.assert_awaited_once_with("a1", "New", REFS, NOW)
        fallback.commit_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_primary_failure_uses_fallback(self, make_article) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.commit_update.side_effect = PersistenceError("HTTP 503")
        updated = make_article(is_updated=True, updated_content="New", references=REFS)
        fallback.commit_update.return_value = updated

        result = await PersistenceAdapter(primary, fallback).commit_update("a1", "New", REFS, NOW)

        assert result is updated
        fallback.commit_update.assert_awaited_once_with("a1", "New", REFS, NOW)

    @pytest.mark.asyncio
    async def test_primary_not_found_uses_fallback(self, make_article) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.commit_update.return_value = None
        fallback.commit_update.return_value = make_article(is_updated=True, updated_content="New", references=REFS)

        await PersistenceAdapter(primary, fallback).commit_update("a1", "New", REFS, NOW)

        fallback.commit_update.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_both_failing_raises(self) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.commit_update.side_effect = PersistenceError("HTTP 503")
        fallback.commit_update.side_effect = PersistenceError("database is locked")

        with pytest.raises(PersistenceError, match="Could not persist article a1"):
            await PersistenceAdapter(primary, fallback).commit_update("a1", "New", REFS, NOW)

    @pytest.mark.asyncio
    async def test_single_store_failure_raises(self) -> None:
        primary = _store("sqlite")
        primary.commit_update.return_value = None
        with pytest.raises(PersistenceError, match="article not found"):
            await PersistenceAdapter(primary).commit_update("missing", "New", REFS, NOW)


class TestReads:
    @pytest.mark.asyncio
    async def test_list_unprocessed_falls_back(self, make_article) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.list_unprocessed.side_effect = PersistenceError("connection refused")
        fallback.list_unprocessed.return_value = [make_article()]

        articles = await PersistenceAdapter(primary, fallback).list_unprocessed(5)

        assert len(articles) == 1
        fallback.list_unprocessed.assert_awaited_once_with(5)

    @pytest.mark.asyncio
    async def test_list_unprocessed_without_fallback_propagates(self) -> None:
        primary = _store("sqlite")
        primary.list_unprocessed.side_effect = PersistenceError("disk I/O error")
        with pytest.raises(PersistenceError):
            await PersistenceAdapter(primary).list_unprocessed()

    @pytest.mark.asyncio
    async def test_stats_falls_back(self) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.stats.side_effect = PersistenceError("connection refused")
        fallback.stats.return_value = ArticleStats(total=4, updated=1, not_updated=3)

        stats = await PersistenceAdapter(primary, fallback).stats()

        assert stats.total == 4

    @pytest.mark.asyncio
    async def test_close_only_touches_closable_stores(self) -> None:
        primary, fallback = _store("http"), _store("sqlite")
        primary.close = AsyncMock()
        await PersistenceAdapter(primary, fallback).close()
        primary.close.assert_awaited_once()
