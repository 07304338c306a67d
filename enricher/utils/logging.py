"""structlog configuration for the enricher.

One processor chain serves both structlog loggers and stdlib ``logging``
(httpx, playwright, uvicorn), ending in a console renderer for development
or a JSON renderer when ``APP_ENV=production`` or ``json_output`` is set.

Two processors are specific to this service:

* credentials are masked before rendering.  ScraperAPI takes its key as a
  query parameter, and httpx logs every request URL at INFO.
* :func:`article_context` binds ``article_id`` into contextvars, so log lines
  from discovery, extraction, retries and throttles inside one article's
  processing all carry it without being passed the id.
"""

import logging
import os
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

_REDACTED = "***"
_SECRET_KEYS = frozenset({"api_key", "apikey", "key", "x-api-key", "x-goog-api-key", "authorization"})
# api_key=abc123 / key=abc123 inside URLs and free-text messages.
_SECRET_QUERY_RE = re.compile(r"(?i)\b(api_key|apikey|key)=[^&\s\"']+")


def redact_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential-looking values in the event dict."""
    for field, value in event_dict.items():
        if field.lower() in _SECRET_KEYS and value:
            event_dict[field] = _REDACTED
        elif isinstance(value, str) and "=" in value:
            event_dict[field] = _SECRET_QUERY_RE.sub(lambda m: f"{m.group(1)}={_REDACTED}", value)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: Render JSON even outside production.
        stream: Where log lines go.  Defaults to stdout; the CLI passes
            stderr so stdout carries only its report.

    Returns:
        The root structlog logger.
    """
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    out = stream or sys.stdout
    level = log_level.upper()
    processors = _shared_processors()

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


@contextmanager
def article_context(article_id: str, **extra: Any) -> Iterator[None]:
    """Bind ``article_id`` (and *extra*) to every log line inside the block."""
    with structlog.contextvars.bound_contextvars(article_id=article_id, **extra):
        yield
