"""Configuration module: exports Settings, PipelineConfig and load_config."""

from enricher.config.loader import PipelineConfig, load_config
from enricher.config.settings import Settings

__all__ = ["PipelineConfig", "Settings", "load_config"]
