"""Human- and machine-readable summaries of a pipeline run."""

from __future__ import annotations

from enricher.models.pipeline import PipelineRunStats

_RULE = "=" * 60
_THIN_RULE = "-" * 60


def format_run_report(stats: PipelineRunStats, *, show_outcomes: bool = True) -> str:
    """Render *stats* as a plain-text summary block."""
    lines = [
        _RULE,
        "ARTICLE ENRICHMENT SUMMARY",
        _RULE,
        f"Succeeded: {stats.succeeded}",
        f"Skipped:   {stats.skipped}",
        f"Failed:    {stats.failed}",
        f"Total:     {stats.total}",
    ]
    if stats.finished_at is not None:
        elapsed = (stats.finished_at - stats.started_at).total_seconds()
        lines.append(f"Elapsed:   {elapsed:.1f}s")

    if show_outcomes and stats.outcomes:
        lines.append(_THIN_RULE)
        for outcome in stats.outcomes:
            line = f"[{outcome.status.value:<7}] {outcome.title[:60]} ({outcome.article_id})"
            if outcome.reason:
                line += f" - {outcome.stage.value.lower()}: {outcome.reason}"
            elif outcome.references_used:
                line += f" - {outcome.references_used} reference(s)"
            lines.append(line)
    lines.append(_RULE)
    return "\n".join(lines)


def run_report_json(stats: PipelineRunStats) -> str:
    """Render *stats* as indented JSON."""
    return stats.model_dump_json(indent=2)
