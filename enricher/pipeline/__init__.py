"""Pipeline orchestration and run reporting."""

from enricher.pipeline.orchestrator import EnrichmentPipeline
from enricher.pipeline.report import format_run_report, run_report_json

__all__ = ["EnrichmentPipeline", "format_run_report", "run_report_json"]
