"""SQLite-backed article store.

Persists articles to a local SQLite database (``data/articles.db`` by
default) using ``aiosqlite`` for async I/O.  This store backs the REST API
and is also the pipeline's direct-write fallback when the API is down.

References are stored as a JSON array in a single column so that marking an
article enriched is one ``UPDATE`` of one row, which SQLite applies
atomically.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from enricher.interfaces.article_store import IArticleStore
from enricher.models.article import Article, ArticleStats, Reference
from enricher.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/articles.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS articles (
    id               TEXT    PRIMARY KEY,
    title            TEXT    NOT NULL,
    content          TEXT    NOT NULL,
    author           TEXT    NOT NULL DEFAULT 'Unknown Author',
    published_date   TEXT    NOT NULL,
    source_url       TEXT    NOT NULL,
    image_url        TEXT,
    is_updated       INTEGER NOT NULL DEFAULT 0,
    updated_content  TEXT,
    references_json  TEXT    NOT NULL DEFAULT '[]',
    scraped_at       TEXT    NOT NULL,
    last_updated     TEXT,
    created_at       TEXT    NOT NULL,
    updated_at       TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_articles_is_updated ON articles(is_updated);",
    "CREATE INDEX IF NOT EXISTS idx_articles_created_at ON articles(created_at);",
]

_COLUMNS = (
    "id, title, content, author, published_date, source_url, image_url, is_updated, "
    "updated_content, references_json, scraped_at, last_updated, created_at, updated_at"
)

_INSERT_SQL = f"INSERT INTO articles ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);"

_REPLACE_SQL = """\
UPDATE articles
SET title = ?, content = ?, author = ?, published_date = ?, source_url = ?,
    image_url = ?, is_updated = ?, updated_content = ?, references_json = ?,
    scraped_at = ?, last_updated = ?, updated_at = ?
WHERE id = ?;
"""

_COMMIT_UPDATE_SQL = """\
UPDATE articles
SET is_updated = 1, updated_content = ?, references_json = ?,
    last_updated = ?, updated_at = ?
WHERE id = ?;
"""


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _row_to_article(row: aiosqlite.Row) -> Article:
    data = dict(row)
    data["references"] = json.loads(data.pop("references_json") or "[]")
    data["is_updated"] = bool(data["is_updated"])
    return Article.model_validate(data)


def _article_params(article: Article) -> tuple[Any, ...]:
    return (
        article.title,
        article.content,
        article.author,
        _iso(article.published_date),
        article.source_url,
        article.image_url,
        int(article.is_updated),
        article.updated_content,
        json.dumps([ref.model_dump() for ref in article.references]),
        _iso(article.scraped_at),
        _iso(article.last_updated),
        _iso(article.updated_at),
    )


class SQLiteArticleStore(IArticleStore):
    """SQLite-backed article persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Create the articles table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        self._initialized = True
        logger.info("article_db_initialized", path=str(self._db_path))

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection, creating the schema on first use.

        Driver errors surface as :class:`PersistenceError`.
        """
        try:
            if not self._initialized:
                await self.initialize()
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"SQLite error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    # ------------------------------------------------------------------
    # Pipeline operations
    # ------------------------------------------------------------------

    async def list_unprocessed(self, limit: int | None = None) -> list[Article]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM articles WHERE is_updated = 0 "
                "ORDER BY created_at ASC LIMIT ?",
                (limit if limit is not None else -1,),
            )
            rows = await cursor.fetchall()
        return [_row_to_article(row) for row in rows]

    async def commit_update(
        self,
        article_id: str,
        updated_content: str,
        references: list[Reference],
        timestamp: datetime,
    ) -> Article | None:
        if not updated_content.strip() or not references:
            raise ValueError("An enrichment needs non-empty content and at least one reference")

        refs_json = json.dumps([ref.model_dump() for ref in references])
        async with self._connect() as db:
            cursor = await db.execute(
                _COMMIT_UPDATE_SQL,
                (updated_content, refs_json, _iso(timestamp), _iso(timestamp), article_id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                logger.warning("commit_update_not_found", article_id=article_id)
                return None
            cursor = await db.execute(f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (article_id,))
            row = await cursor.fetchone()

        logger.info("article_committed", article_id=article_id, references=len(references))
        return _row_to_article(row) if row is not None else None

    # ------------------------------------------------------------------
    # CRUD (REST API)
    # ------------------------------------------------------------------

    async def list_articles(
        self,
        page: int = 1,
        limit: int = 10,
        is_updated: bool | None = None,
    ) -> tuple[list[Article], int]:
        where = ""
        params: tuple[Any, ...] = ()
        if is_updated is not None:
            where = "WHERE is_updated = ?"
            params = (int(is_updated),)
        offset = max(page - 1, 0) * limit

        async with self._connect() as db:
            cursor = await db.execute(f"SELECT COUNT(*) AS n FROM articles {where}", params)
            total = (await cursor.fetchone())["n"]
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM articles {where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
        return [_row_to_article(row) for row in rows], total

    async def get(self, article_id: str) -> Article | None:
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT {_COLUMNS} FROM articles WHERE id = ?", (article_id,))
            row = await cursor.fetchone()
        return _row_to_article(row) if row is not None else None

    async def find_by_source_url(self, source_url: str) -> Article | None:
        """Return the article scraped from *source_url*, or ``None``."""
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM articles WHERE source_url = ? LIMIT 1", (source_url.strip(),)
            )
            row = await cursor.fetchone()
        return _row_to_article(row) if row is not None else None

    async def create(self, article: Article) -> Article:
        async with self._connect() as db:
            params = _article_params(article)
            # _article_params omits id and created_at, which only INSERT sets.
            await db.execute(
                _INSERT_SQL,
                (article.id, *params[:11], _iso(article.created_at), params[11]),
            )
            await db.commit()
        logger.info("article_created", article_id=article.id, title=article.title[:80])
        return article

    async def update(self, article_id: str, changes: dict[str, Any]) -> Article | None:
        existing = await self.get(article_id)
        if existing is None:
            return None

        merged = existing.model_dump()
        merged.update({k: v for k, v in changes.items() if k not in ("id", "created_at")})
        merged["updated_at"] = datetime.now(tz=timezone.utc)  # noqa: UP017
        # Re-validate so the API cannot store an inconsistent article.
        article = Article.model_validate(merged)

        async with self._connect() as db:
            await db.execute(_REPLACE_SQL, (*_article_params(article), article_id))
            await db.commit()
        logger.info("article_updated", article_id=article_id, fields=sorted(changes))
        return article

    async def delete(self, article_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM articles WHERE id = ?", (article_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("article_deleted", article_id=article_id)
        return deleted

    async def stats(self) -> ArticleStats:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT COUNT(*) AS total, COALESCE(SUM(is_updated), 0) AS updated FROM articles"
            )
            row = await cursor.fetchone()
        total, updated = row["total"], row["updated"]
        return ArticleStats(total=total, updated=updated, not_updated=total - updated)

    def get_provider_name(self) -> str:
        return "sqlite"
