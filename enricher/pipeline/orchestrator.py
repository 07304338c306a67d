"""Central orchestrator for the article enrichment pipeline.

Drives one article at a time through four stages::

    SEARCHING    -> ReferenceDiscovery finds up to N candidate URLs
    EXTRACTING   -> ContentExtractor renders each URL in turn
    SYNTHESIZING -> ContentSynthesizer rewrites the article from them
    PERSISTING   -> PersistenceAdapter commits body + references

Every article ends in exactly one outcome:

- **skipped**: already enriched, no usable references, or a stage
  failed in a way that only concerns this article (rejected request,
  exhausted rate-limit retries, empty generation).  The article is left
  untouched and will be picked up again on the next run.
- **failed**: the rewrite was produced but neither store accepted it, or
  something unexpected went wrong.
- **success**: the enrichment was committed.

No per-article failure stops the run.  A missing credential does: it would
fail every article the same way, so :meth:`EnrichmentPipeline.ensure_ready`
checks every provider before the first article, and a
:class:`ConfigurationError` surfacing mid-run is re-raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Callable

import structlog

from enricher.config.loader import PipelineConfig
from enricher.models.article import Article, Reference
from enricher.models.content import ExtractedContent
from enricher.models.pipeline import (
    ArticleOutcome,
    ArticleStage,
    OutcomeStatus,
    PipelineRunStats,
)
from enricher.services.content_extractor import ContentExtractor
from enricher.services.content_synthesizer import ContentSynthesizer
from enricher.services.persistence import PersistenceAdapter
from enricher.services.reference_discovery import ReferenceDiscovery
from enricher.utils.errors import (
    ConfigurationError,
    EnricherError,
    PersistenceError,
    PipelineError,
)
from enricher.utils.logging import article_context, get_logger
from enricher.utils.throttle import Throttle


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class EnrichmentPipeline:
    """Enriches unprocessed articles sequentially.

    All collaborators are injected; the pipeline never constructs providers.

    Parameters
    ----------
    discovery, extractor, synthesizer, persistence:
        The stage services.
    config:
        Pipeline tunables.  Defaults to :class:`PipelineConfig` defaults.
    article_throttle:
        Spaces successive articles.  Defaults to ``config.article_delay``.
    clock:
        Source of the ``last_updated`` timestamp.
    """

    def __init__(
        self,
        discovery: ReferenceDiscovery,
        extractor: ContentExtractor,
        synthesizer: ContentSynthesizer,
        persistence: PersistenceAdapter,
        config: PipelineConfig | None = None,
        article_throttle: Throttle | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._discovery = discovery
        self._extractor = extractor
        self._synthesizer = synthesizer
        self._persistence = persistence
        self._config = config or PipelineConfig()
        self._article_throttle = article_throttle or Throttle(
            self._config.article_delay, name="article"
        )
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Run entry points
    # ------------------------------------------------------------------

    def ensure_ready(self) -> None:
        """Raise :class:`ConfigurationError` unless every provider is configured."""
        providers = (
            self._discovery.provider,
            self._extractor.renderer,
            self._synthesizer.llm_provider,
        )
        missing = [p.get_provider_name() for p in providers if not p.is_available()]
        if missing:
            raise ConfigurationError(
                message=f"Providers not configured: {', '.join(missing)}",
            )

    async def run(self, limit: int | None = None) -> PipelineRunStats:
        """Enrich up to *limit* unprocessed articles from the store.

        Raises
        ------
        ConfigurationError
            Before any article is touched if a provider is not configured,
            or as soon as one reports a missing/invalid credential.
        PipelineError
            If neither store can list the unprocessed articles.
        """
        self.ensure_ready()
        batch_limit = limit if limit is not None else self._config.batch_limit
        try:
            articles = await self._persistence.list_unprocessed(batch_limit)
        except PersistenceError as exc:
            raise PipelineError(message=f"Could not load unprocessed articles: {exc}") from exc
        self._logger.info("pipeline_run_started", articles=len(articles), limit=batch_limit)
        if not articles:
            self._logger.info("no_articles_to_process")
        return await self.process_batch(articles)

    async def process_batch(self, articles: Sequence[Article]) -> PipelineRunStats:
        """Enrich an explicit batch of articles and return the run statistics.

        A :class:`ConfigurationError` aborts the batch; the outcomes recorded
        so far travel with it as ``partial_stats``.
        """
        stats = PipelineRunStats()
        # The first article of every batch goes straight through.
        self._article_throttle.reset()
        for index, article in enumerate(articles, start=1):
            self._logger.info(
                "article_started",
                position=index,
                of=len(articles),
                article_id=article.id,
                title=article.title[:80],
            )
            try:
                outcome = await self.process_article(article)
            except ConfigurationError as exc:
                stats.finish()
                exc.partial_stats = stats
                self._logger.error(
                    "pipeline_run_aborted",
                    article_id=article.id,
                    succeeded=stats.succeeded,
                    skipped=stats.skipped,
                    failed=stats.failed,
                )
                raise
            stats.record(outcome)
            self._logger.info(
                "article_finished",
                article_id=article.id,
                status=outcome.status.value,
                stage=outcome.stage.value,
                reason=outcome.reason,
            )

        stats.finish()
        self._logger.info(
            "pipeline_run_complete",
            succeeded=stats.succeeded,
            skipped=stats.skipped,
            failed=stats.failed,
            total=stats.total,
        )
        return stats

    # ------------------------------------------------------------------
    # Per-article state machine
    # ------------------------------------------------------------------

    async def process_article(self, article: Article) -> ArticleOutcome:
        """Run one article through every stage and report how it ended.

        Only :class:`ConfigurationError` escapes; every other failure is
        converted into a skipped or failed outcome.
        """
        if article.is_updated:
            return self._outcome(article, OutcomeStatus.SKIPPED, ArticleStage.PENDING, "already updated")

        # Already-enriched articles never wait on the throttle.
        await self._article_throttle.wait()

        with article_context(article.id):
            return await self._enrich(article)

    async def _enrich(self, article: Article) -> ArticleOutcome:
        stage = ArticleStage.PENDING
        try:
            stage = ArticleStage.SEARCHING
            try:
                candidates = await self._discovery.find_references(
                    article.title, max_results=self._config.max_references
                )
            except ConfigurationError:
                raise
            except EnricherError as exc:
                return self._outcome(article, OutcomeStatus.SKIPPED, stage, f"search failed: {exc}")
            if not candidates:
                return self._outcome(article, OutcomeStatus.SKIPPED, stage, "no reference candidates found")

            stage = ArticleStage.EXTRACTING
            references: list[ExtractedContent] = []
            for candidate in candidates:
                extracted = await self._extractor.extract(candidate.url)
                if not extracted.is_sufficient(self._config.min_content_length):
                    self._logger.info(
                        "reference_rejected",
                        url=candidate.url,
                        error=extracted.error,
                        length=len(extracted.content),
                    )
                    continue
                references.append(
                    extracted.model_copy(
                        update={"title": extracted.title.strip() or candidate.title, "url": candidate.url}
                    )
                )
            if not references:
                return self._outcome(article, OutcomeStatus.SKIPPED, stage, "no reference had enough content")

            stage = ArticleStage.SYNTHESIZING
            try:
                updated_content = await self._synthesizer.synthesize(article.title, article.content, references)
            except ConfigurationError:
                raise
            except EnricherError as exc:
                return self._outcome(article, OutcomeStatus.SKIPPED, stage, f"synthesis failed: {exc}")

            stage = ArticleStage.PERSISTING
            try:
                await self._persistence.commit_update(
                    article.id,
                    updated_content,
                    [Reference(title=ref.title, url=ref.url) for ref in references],
                    self._clock(),
                )
            except PersistenceError as exc:
                return self._outcome(article, OutcomeStatus.FAILED, stage, str(exc))

            return self._outcome(
                article,
                OutcomeStatus.SUCCESS,
                ArticleStage.DONE,
                references_used=len(references),
            )
        except ConfigurationError:
            self._logger.error("pipeline_configuration_error", stage=stage.value)
            raise
        except Exception as exc:
            self._logger.exception("article_unexpected_error", stage=stage.value, error=str(exc))
            return self._outcome(
                article,
                OutcomeStatus.FAILED,
                stage,
                f"unexpected error: {type(exc).__name__}: {exc}",
            )

    @staticmethod
    def _outcome(
        article: Article,
        status: OutcomeStatus,
        stage: ArticleStage,
        reason: str = "",
        references_used: int = 0,
    ) -> ArticleOutcome:
        return ArticleOutcome(
            article_id=article.id,
            title=article.title,
            status=status,
            stage=stage,
            reason=reason,
            references_used=references_used,
        )
