"""Domain models: re-exports all public model classes.

    - article.py  : Article and Reference (persisted)
    - content.py  : ExtractedContent (transient, per reference page)
    - pipeline.py : stage/outcome enums, PipelineRunStats and SeedOutcome
"""

from __future__ import annotations

from enricher.models.article import Article, ArticleStats, Reference
from enricher.models.content import ExtractedContent
from enricher.models.pipeline import (
    ArticleOutcome,
    ArticleStage,
    OutcomeStatus,
    PipelineRunStats,
    SeedOutcome,
    SeedStatus,
)

__all__ = [
    "Article",
    "ArticleOutcome",
    "ArticleStats",
    "ArticleStage",
    "ExtractedContent",
    "OutcomeStatus",
    "PipelineRunStats",
    "Reference",
    "SeedOutcome",
    "SeedStatus",
]
