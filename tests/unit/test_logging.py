"""Unit tests for structlog configuration, credential masking and article context."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from enricher.utils.logging import article_context, configure_logging, redact_secrets


@pytest.fixture
def json_stream():
    stream = io.StringIO()
    configure_logging(log_level="INFO", json_output=True, stream=stream)
    yield stream
    configure_logging()


class TestRedactSecrets:
    def test_masks_credential_fields(self) -> None:
        event = redact_secrets(None, "info", {"event": "x", "api_key": "sk-live", "X-API-KEY": "abc"})
        assert event["api_key"] == "***"
        assert event["X-API-KEY"] == "***"
        assert event["event"] == "x"

    def test_masks_key_query_parameters(self) -> None:
        event = redact_secrets(
            None,
            "info",
            {"event": "HTTP Request: GET https://api.scraperapi.com?api_key=secret123&url=https%3A%2F%2Fg.co"},
        )
        assert "secret123" not in event["event"]
        assert "api_key=***&url=" in event["event"]

    def test_leaves_other_values_alone(self) -> None:
        event = redact_secrets(None, "info", {"event": "article_seeded", "reason": "a=b", "count": 3})
        assert event == {"event": "article_seeded", "reason": "a=b", "count": 3}

    def test_empty_key_not_reported_as_set(self) -> None:
        assert redact_secrets(None, "info", {"api_key": ""})["api_key"] == ""


class TestArticleContext:
    def test_binds_and_unbinds_article_id(self) -> None:
        with article_context("a1", run="nightly"):
            assert structlog.contextvars.get_contextvars() == {"article_id": "a1", "run": "nightly"}
        assert "article_id" not in structlog.contextvars.get_contextvars()


class TestConfigureLogging:
    def test_json_lines_carry_context_and_mask_keys(self, json_stream: io.StringIO) -> None:
        with article_context("a42"):
            structlog.get_logger("test").info("search_request", url="https://x.test/?key=abc")

        line = json.loads(json_stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "search_request"
        assert line["article_id"] == "a42"
        assert line["url"] == "https://x.test/?key=***"
        assert line["level"] == "info"

    def test_stdlib_logging_is_bridged(self, json_stream: io.StringIO) -> None:
        logging.getLogger("httpx").warning("GET https://api.scraperapi.com?api_key=zzz")

        line = json.loads(json_stream.getvalue().strip().splitlines()[-1])
        assert "zzz" not in line["event"]
        assert line["level"] == "warning"
