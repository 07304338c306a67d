"""Article enricher application entry point.

Wires providers, services and the pipeline together from ``Settings``
(.env / environment) and ``PipelineConfig`` (config/config.yaml), and builds
the FastAPI application that serves the article REST API.

``build_pipeline`` is shared by the CLI and anything else that wants to run
an enrichment batch outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from enricher import __version__
from enricher.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    configure_exception_handlers,
)
from enricher.api.routes import router as api_router
from enricher.config.loader import PipelineConfig, load_config
from enricher.config.settings import Settings
from enricher.interfaces.article_store import IArticleStore
from enricher.interfaces.llm_provider import ILLMProvider
from enricher.interfaces.page_renderer import IPageRenderer
from enricher.interfaces.web_search_provider import IWebSearchProvider
from enricher.pipeline.orchestrator import EnrichmentPipeline
from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider
from enricher.providers.llm.gemini_provider import GeminiLLMProvider
from enricher.providers.llm.openai_provider import OpenAILLMProvider
from enricher.providers.renderer.playwright_renderer import PlaywrightPageRenderer
from enricher.providers.search.scraperapi_provider import ScraperApiGoogleProvider
from enricher.providers.search.serper_provider import SerperSearchProvider
from enricher.providers.store.http_article_store import HttpArticleStore
from enricher.providers.store.sqlite_article_store import SQLiteArticleStore
from enricher.services.article_seeder import ArticleSeeder
from enricher.services.content_extractor import ContentExtractor
from enricher.services.content_synthesizer import ContentSynthesizer
from enricher.services.persistence import PersistenceAdapter
from enricher.services.reference_discovery import ReferenceDiscovery
from enricher.utils.errors import ConfigurationError
from enricher.utils.logging import configure_logging, get_logger
from enricher.utils.throttle import Throttle

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def build_search_provider(app_settings: Settings, config: PipelineConfig) -> IWebSearchProvider:
    """Return the search provider named by ``SEARCH_PROVIDER``."""
    name = app_settings.search_provider.lower()
    api_key = app_settings.search_api_key()
    if name == "serper":
        return SerperSearchProvider(api_key=api_key, timeout=config.search_timeout)
    if name == "scraperapi":
        return ScraperApiGoogleProvider(api_key=api_key, timeout=config.search_timeout)
    raise ConfigurationError(message=f"Unknown SEARCH_PROVIDER {app_settings.search_provider!r}")


def build_llm_provider(app_settings: Settings, config: PipelineConfig) -> ILLMProvider:
    """Return the generative provider named by ``LLM_PROVIDER``."""
    name = app_settings.llm_provider.lower()
    if name == "gemini":
        return GeminiLLMProvider(settings=app_settings, timeout=config.llm_timeout)
    if name == "openai":
        return OpenAILLMProvider(settings=app_settings, timeout=config.llm_timeout)
    if name == "anthropic":
        return AnthropicLLMProvider(settings=app_settings, timeout=config.llm_timeout)
    raise ConfigurationError(message=f"Unknown LLM_PROVIDER {app_settings.llm_provider!r}")


def build_renderer(app_settings: Settings, config: PipelineConfig) -> IPageRenderer:
    return PlaywrightPageRenderer(
        headless=app_settings.browser_headless,
        navigation_timeout=config.navigation_timeout,
        settle_delay=config.settle_delay,
    )


def build_stores(app_settings: Settings) -> tuple[IArticleStore, IArticleStore | None]:
    """Return ``(primary, fallback)`` article stores.

    With ``API_BASE_URL`` set the REST API is primary and the database the
    fallback; without it the database is the only store.
    """
    database = SQLiteArticleStore(app_settings.database_path)
    if app_settings.api_base_url:
        return HttpArticleStore(base_url=app_settings.api_base_url), database
    return database, None


# ---------------------------------------------------------------------------
# Pipeline assembly
# ---------------------------------------------------------------------------


def build_pipeline(
    custom_settings: Settings | None = None,
    config: PipelineConfig | None = None,
) -> dict[str, Any]:
    """Build every provider and service and return them by name.

    The ``pipeline`` entry is ready to :meth:`~EnrichmentPipeline.run`.
    Call :func:`close_components` when finished.
    """
    app_settings = custom_settings or settings
    cfg = config or load_config(app_settings.config_path)

    search_provider = build_search_provider(app_settings, cfg)
    llm_provider = build_llm_provider(app_settings, cfg)
    renderer = build_renderer(app_settings, cfg)
    primary_store, fallback_store = build_stores(app_settings)

    discovery = ReferenceDiscovery(
        search_provider,
        throttle=Throttle(cfg.search_interval, name="search"),
        max_attempts=cfg.retry_attempts,
        backoff_base=cfg.search_backoff,
        search_candidates=cfg.search_candidates,
    )
    extractor = ContentExtractor(
        renderer,
        throttle=Throttle(cfg.scrape_delay, name="scrape"),
        min_fragment_length=cfg.min_fragment_length,
    )
    synthesizer = ContentSynthesizer(
        llm_provider,
        char_budget=cfg.prompt_char_budget,
        temperature=cfg.temperature,
        max_output_tokens=cfg.max_output_tokens,
        max_attempts=cfg.retry_attempts,
        backoff_base=cfg.synthesis_backoff,
    )
    persistence = PersistenceAdapter(primary_store, fallback_store)
    pipeline = EnrichmentPipeline(
        discovery,
        extractor,
        synthesizer,
        persistence,
        config=cfg,
        article_throttle=Throttle(cfg.article_delay, name="article"),
    )

    _logger.info(
        "pipeline_built",
        search=search_provider.get_provider_name(),
        llm=llm_provider.get_provider_name(),
        renderer=renderer.get_provider_name(),
        primary_store=primary_store.get_provider_name(),
        fallback_store=fallback_store.get_provider_name() if fallback_store else None,
    )
    return {
        "config": cfg,
        "pipeline": pipeline,
        "search_provider": search_provider,
        "llm_provider": llm_provider,
        "renderer": renderer,
        "primary_store": primary_store,
        "fallback_store": fallback_store,
    }


def build_seeder(
    custom_settings: Settings | None = None,
    config: PipelineConfig | None = None,
) -> dict[str, Any]:
    """Build the seeding service; it always writes to the SQLite database."""
    app_settings = custom_settings or settings
    cfg = config or load_config(app_settings.config_path)

    renderer = build_renderer(app_settings, cfg)
    database = SQLiteArticleStore(app_settings.database_path)
    extractor = ContentExtractor(
        renderer,
        throttle=Throttle(cfg.scrape_delay, name="scrape"),
        min_fragment_length=cfg.min_fragment_length,
    )
    seeder = ArticleSeeder(extractor, database, min_content_length=cfg.min_content_length)
    return {"config": cfg, "seeder": seeder, "renderer": renderer, "primary_store": database}


async def close_components(components: dict[str, Any]) -> None:
    """Release browser processes and HTTP connection pools."""
    for key in ("renderer", "search_provider", "llm_provider", "primary_store", "fallback_store"):
        component = components.get(key)
        close = getattr(component, "close", None)
        if close is not None:
            await close()


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------


def create_app(store: IArticleStore | None = None) -> FastAPI:
    """Build the article API.  *store* defaults to the configured SQLite database."""

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        article_store = store or SQLiteArticleStore(settings.database_path)
        if isinstance(article_store, SQLiteArticleStore):
            await article_store.initialize()
        application.state.store = article_store
        _logger.info(
            "app_startup",
            version=__version__,
            environment=settings.app_env,
            store=article_store.get_provider_name(),
        )
        yield
        _logger.info("app_shutdown")

    application = FastAPI(
        title="Article Enricher API",
        version=__version__,
        description="CRUD and statistics for articles and their enriched rewrites.",
        lifespan=_lifespan,
    )

    # Last added = first executed.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)
    configure_exception_handlers(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "enricher.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
