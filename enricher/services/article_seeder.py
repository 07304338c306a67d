"""Seeds the article database from source pages.

Each URL is rendered with the same :class:`ContentExtractor` the pipeline
uses for references, and stored as a new unprocessed article.  Pages already
in the database (matched on ``source_url``) are left alone, so seeding the
same list twice is harmless.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from enricher.models.article import TITLE_MAX_LENGTH, Article
from enricher.models.pipeline import SeedOutcome, SeedStatus
from enricher.providers.store.sqlite_article_store import SQLiteArticleStore
from enricher.services.content_extractor import ContentExtractor
from enricher.utils.logging import get_logger
from enricher.utils.text_normalizer import clean_content, title_from_url, truncate


class ArticleSeeder:
    """Creates unprocessed articles from a list of source URLs."""

    def __init__(
        self,
        extractor: ContentExtractor,
        store: SQLiteArticleStore,
        min_content_length: int = 100,
    ) -> None:
        self._extractor = extractor
        self._store = store
        self._min_content_length = min_content_length
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def seed(self, urls: Sequence[str]) -> list[SeedOutcome]:
        outcomes: list[SeedOutcome] = []
        for url in urls:
            outcome = await self.seed_one(url)
            self._logger.info(
                "article_seeded",
                url=url,
                status=outcome.status.value,
                article_id=outcome.article_id,
                reason=outcome.reason,
            )
            outcomes.append(outcome)
        return outcomes

    async def seed_one(self, url: str) -> SeedOutcome:
        url = url.strip()
        existing = await self._store.find_by_source_url(url)
        if existing is not None:
            return SeedOutcome(url=url, status=SeedStatus.EXISTS, article_id=existing.id, title=existing.title)

        extracted = await self._extractor.extract(url)
        content = clean_content(extracted.content)
        if extracted.error:
            return SeedOutcome(url=url, status=SeedStatus.REJECTED, reason=extracted.content)
        if len(content) < self._min_content_length:
            return SeedOutcome(
                url=url,
                status=SeedStatus.REJECTED,
                reason=f"only {len(content)} characters of content",
            )

        title = truncate(extracted.title.strip() or title_from_url(url), TITLE_MAX_LENGTH)
        article = await self._store.create(Article(title=title, content=content, source_url=url))
        return SeedOutcome(url=url, status=SeedStatus.CREATED, article_id=article.id, title=article.title)
