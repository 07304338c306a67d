"""Article store client for the article REST API.

The pipeline's primary persistence path: enrichment results are written
through the same API the front end reads from, so any validation or hooks
the API applies also apply to pipeline writes.  Transport failures and
non-2xx answers (other than 404) surface as :class:`PersistenceError`,
which lets the persistence adapter fall back to the database.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from enricher.interfaces.article_store import IArticleStore
from enricher.models.article import Article, ArticleStats, Reference
from enricher.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 30.0
# The API caps page size at this value.
_PAGE_SIZE = 100


class HttpArticleStore(IArticleStore):
    """IArticleStore backed by the ``/api/articles`` REST endpoints."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Send a request and return the decoded envelope, or ``None`` on 404."""
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.HTTPError as exc:
            raise PersistenceError(
                message=f"{method} {url} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise PersistenceError(
                message=f"{method} {url} returned HTTP {response.status_code}: {response.text[:200]}",
                provider_name=self.get_provider_name(),
            )
        try:
            envelope = response.json()
        except ValueError as exc:
            raise PersistenceError(
                message=f"{method} {url} returned a non-JSON body",
                provider_name=self.get_provider_name(),
            ) from exc
        if not envelope.get("success", False):
            raise PersistenceError(
                message=envelope.get("message") or f"{method} {url} was not successful",
                provider_name=self.get_provider_name(),
            )
        return envelope

    # ------------------------------------------------------------------
    # Pipeline operations
    # ------------------------------------------------------------------

    async def list_unprocessed(self, limit: int | None = None) -> list[Article]:
        # The API lists newest first, so every page is read before the oldest
        # can be picked.
        articles: list[Article] = []
        page = 1
        while True:
            batch, total = await self.list_articles(page=page, limit=_PAGE_SIZE, is_updated=False)
            articles.extend(batch)
            if not batch or len(articles) >= total:
                break
            page += 1
        articles.sort(key=lambda a: a.created_at)
        return articles if limit is None else articles[:limit]

    async def commit_update(
        self,
        article_id: str,
        updated_content: str,
        references: list[Reference],
        timestamp: datetime,
    ) -> Article | None:
        envelope = await self._request(
            "PUT",
            f"/articles/{article_id}",
            json={
                "isUpdated": True,
                "updatedContent": updated_content,
                "references": [ref.model_dump(by_alias=True) for ref in references],
                "lastUpdated": timestamp.isoformat(),
            },
        )
        if envelope is None:
            logger.warning("commit_update_not_found", article_id=article_id, store="http")
            return None
        logger.info("article_committed", article_id=article_id, references=len(references), store="http")
        return Article.model_validate(envelope["data"])

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_articles(
        self,
        page: int = 1,
        limit: int = 10,
        is_updated: bool | None = None,
    ) -> tuple[list[Article], int]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if is_updated is not None:
            params["isUpdated"] = str(is_updated).lower()
        envelope = await self._request("GET", "/articles", params=params)
        if envelope is None:
            return [], 0
        articles = [Article.model_validate(item) for item in envelope.get("data") or []]
        total = (envelope.get("pagination") or {}).get("totalArticles", len(articles))
        return articles, total

    async def get(self, article_id: str) -> Article | None:
        envelope = await self._request("GET", f"/articles/{article_id}")
        return Article.model_validate(envelope["data"]) if envelope else None

    async def create(self, article: Article) -> Article:
        payload = article.model_dump(
            mode="json",
            by_alias=True,
            include={"title", "content", "author", "published_date", "source_url", "image_url"},
        )
        envelope = await self._request("POST", "/articles", json=payload)
        if envelope is None:
            raise PersistenceError(
                message="Article endpoint not found",
                provider_name=self.get_provider_name(),
            )
        return Article.model_validate(envelope["data"])

    async def update(self, article_id: str, changes: dict[str, Any]) -> Article | None:
        payload = {to_camel(key): to_jsonable_python(value) for key, value in changes.items()}
        envelope = await self._request("PUT", f"/articles/{article_id}", json=payload)
        return Article.model_validate(envelope["data"]) if envelope else None

    async def delete(self, article_id: str) -> bool:
        envelope = await self._request("DELETE", f"/articles/{article_id}")
        return envelope is not None

    async def stats(self) -> ArticleStats:
        envelope = await self._request("GET", "/articles/stats")
        if envelope is None:
            return ArticleStats()
        return ArticleStats.model_validate(envelope["data"])

    async def close(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "http"
