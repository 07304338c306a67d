"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables**, e.g. GEMINI_API_KEY=abc123
#      (highest priority, always wins)
#   2. **.env file**: key=value lines in the project root .env file
#
# Field name `gemini_api_key` maps to env var `GEMINI_API_KEY`.
#
# Credentials are read ONCE here and passed into provider constructors.
# No provider reads os.environ on its own.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Article enricher settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Web Search ===
    # "serper" (structured JSON) or "scraperapi" (Google results HTML via ScraperAPI).
    search_provider: str = "serper"
    serper_api_key: str = ""
    scraper_api_key: str = ""

    # === Generative text ===
    # "gemini", "openai" or "anthropic".
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # === Page rendering ===
    browser_headless: bool = True

    # === Record store ===
    database_path: str = "data/articles.db"
    # Base URL of the article REST API used as the primary write path.
    # Empty string = write straight to the database.
    api_base_url: str = "http://localhost:8000/api"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    def search_api_key(self) -> str:
        """Return the credential for the selected search provider."""
        if self.search_provider.lower() == "scraperapi":
            return self.scraper_api_key
        return self.serper_api_key
