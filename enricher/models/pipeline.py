"""Run-level models for the enrichment pipeline.

Each article moves through a fixed sequence of stages::

    PENDING → SEARCHING → EXTRACTING → SYNTHESIZING → PERSISTING → DONE

and leaves the pipeline with one :class:`OutcomeStatus`.  The orchestrator
records one :class:`ArticleOutcome` per article in a
:class:`PipelineRunStats`, which lives for a single invocation and is only
used for reporting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ArticleStage(str, Enum):  # noqa: UP042 (StrEnum requires Python 3.11+)
    """Stage an article was in when its processing ended."""

    PENDING = "PENDING"
    SEARCHING = "SEARCHING"
    EXTRACTING = "EXTRACTING"
    SYNTHESIZING = "SYNTHESIZING"
    PERSISTING = "PERSISTING"
    DONE = "DONE"


class OutcomeStatus(str, Enum):  # noqa: UP042
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class ArticleOutcome(BaseModel):
    """How one article left the pipeline."""

    model_config = ConfigDict(frozen=True)

    article_id: str
    title: str
    status: OutcomeStatus
    # The stage in which processing stopped (DONE for successes).
    stage: ArticleStage
    reason: str = ""
    references_used: int = 0


class PipelineRunStats(BaseModel):
    """Aggregate counts for one pipeline invocation.

    Mutated only by the orchestrator through :meth:`record`.
    """

    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    finished_at: datetime | None = None
    outcomes: list[ArticleOutcome] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        """Number of articles attempted in this run."""
        return self.succeeded + self.skipped + self.failed

    def record(self, outcome: ArticleOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.SUCCESS:
            self.succeeded += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    def finish(self) -> None:
        self.finished_at = datetime.now(tz=timezone.utc)  # noqa: UP017


class SeedStatus(str, Enum):  # noqa: UP042
    CREATED = "CREATED"
    EXISTS = "EXISTS"
    REJECTED = "REJECTED"


class SeedOutcome(BaseModel):
    """Result of seeding the store from one source page."""

    model_config = ConfigDict(frozen=True)

    url: str
    status: SeedStatus
    article_id: str | None = None
    title: str = ""
    reason: str = ""
