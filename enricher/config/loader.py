"""YAML pipeline configuration loader.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. PipelineConfig defaults : the values the pipeline was tuned with
#   2. config/config.yaml      : checked-in overrides
#   3. explicit overrides      : e.g. CLI flags such as --limit
#
# Credentials never live in YAML; they come from Settings (.env / env vars).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from enricher.utils.errors import ConfigurationError


class PipelineConfig(BaseModel):
    """Tunables for the enrichment pipeline.  Durations are in seconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Discovery
    max_references: int = Field(default=2, ge=1, le=10)
    search_candidates: int = Field(default=10, ge=1, le=100)
    search_interval: float = Field(default=1.0, ge=0.0)
    search_timeout: float = Field(default=60.0, gt=0.0)

    # Extraction
    min_content_length: int = Field(default=100, ge=0)
    min_fragment_length: int = Field(default=30, ge=0)
    scrape_delay: float = Field(default=2.0, ge=0.0)
    settle_delay: float = Field(default=2.0, ge=0.0)
    navigation_timeout: float = Field(default=30.0, gt=0.0)

    # Synthesis
    prompt_char_budget: int = Field(default=3000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=8192, ge=1)
    llm_timeout: float = Field(default=60.0, gt=0.0)

    # Retry policy
    retry_attempts: int = Field(default=3, ge=1)
    search_backoff: float = Field(default=2.0, ge=0.0)
    synthesis_backoff: float = Field(default=3.0, ge=0.0)

    # Orchestration
    article_delay: float = Field(default=5.0, ge=0.0)
    batch_limit: int = Field(default=100, ge=1)


def load_config(path: str | Path = "config/config.yaml", **overrides: Any) -> PipelineConfig:
    """Load the ``pipeline`` section of a YAML file into a PipelineConfig.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            the defaults.
        **overrides: Values that win over both defaults and the file.

    Returns:
        Validated, frozen pipeline configuration.

    Raises:
        ConfigurationError: If the file is malformed or a value is invalid.
    """
    config_path = Path(path)
    raw: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                # safe_load never instantiates arbitrary Python objects.
                document = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(document, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping")
        raw = dict(document.get("pipeline") or {})

    _deep_merge(raw, {k: v for k, v in overrides.items() if v is not None})
    try:
        return PipelineConfig(**raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid pipeline configuration: {exc}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
