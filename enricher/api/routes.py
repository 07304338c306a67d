"""FastAPI routes for the article REST API.

# Endpoint                 Method  Description
# ------------------------------------------------------------------
# /api/health              GET     Liveness check
# /api/articles/stats      GET     Enrichment progress counts
# /api/articles            GET     Paginated list, optional isUpdated filter
# /api/articles            POST    Create an article
# /api/articles/{id}       GET     Fetch one article
# /api/articles/{id}       PUT     Partial update (used by the pipeline)
# /api/articles/{id}       DELETE  Delete an article

The store is resolved from ``app.state`` via ``Depends``, so tests can swap
in any :class:`IArticleStore`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from enricher.api.schemas import (
    ApiResponse,
    ArticleCreateRequest,
    ArticleUpdateRequest,
    Pagination,
)
from enricher.interfaces.article_store import IArticleStore
from enricher.models.article import Article
from enricher.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

MAX_PAGE_SIZE = 100


def _get_store(request: Request) -> IArticleStore:
    """Retrieve the article store from app state."""
    return request.app.state.store


StoreDep = Annotated[IArticleStore, Depends(_get_store)]


def _dump(article: Article) -> dict[str, Any]:
    return article.model_dump(mode="json", by_alias=True)


def _envelope(**kwargs: Any) -> dict[str, Any]:
    return ApiResponse(**kwargs).model_dump(mode="json", by_alias=True, exclude_none=True)


def _validation_failed(exc: ValueError) -> HTTPException:
    if isinstance(exc, ValidationError):
        detail = "; ".join(err["msg"] for err in exc.errors())
    else:
        detail = str(exc)
    return HTTPException(status_code=422, detail=f"Validation failed: {detail}")


@router.get("/health")
async def health() -> dict[str, Any]:
    return {
        "success": True,
        "message": "API is healthy",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),  # noqa: UP017
    }


@router.get("/articles/stats")
async def article_stats(store: StoreDep) -> dict[str, Any]:
    stats = await store.stats()
    return _envelope(data=stats.model_dump(by_alias=True))


@router.get("/articles")
async def list_articles(
    store: StoreDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
    is_updated: Annotated[bool | None, Query(alias="isUpdated")] = None,
) -> dict[str, Any]:
    articles, total = await store.list_articles(page=page, limit=limit, is_updated=is_updated)
    return _envelope(
        data=[_dump(a) for a in articles],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/articles/{article_id}")
async def get_article(article_id: str, store: StoreDep) -> dict[str, Any]:
    article = await store.get(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return _envelope(data=_dump(article))


@router.post("/articles", status_code=201)
async def create_article(body: ArticleCreateRequest, store: StoreDep) -> dict[str, Any]:
    fields = body.model_dump(exclude_none=True)
    try:
        article = Article(**fields)
    except ValueError as exc:
        raise _validation_failed(exc) from exc
    created = await store.create(article)
    return _envelope(data=_dump(created), message="Article created successfully")


@router.put("/articles/{article_id}")
async def update_article(
    article_id: str,
    body: ArticleUpdateRequest,
    store: StoreDep,
) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True)
    changes.setdefault("last_updated", datetime.now(tz=timezone.utc))  # noqa: UP017
    try:
        article = await store.update(article_id, changes)
    except ValueError as exc:
        raise _validation_failed(exc) from exc
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    _logger.info("article_updated_via_api", article_id=article_id, fields=sorted(changes))
    return _envelope(data=_dump(article), message="Article updated successfully")


@router.delete("/articles/{article_id}")
async def delete_article(article_id: str, store: StoreDep) -> dict[str, Any]:
    article = await store.get(article_id)
    if article is None or not await store.delete(article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return _envelope(data=_dump(article), message="Article deleted successfully")
