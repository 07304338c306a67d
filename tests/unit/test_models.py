"""Unit tests for the Article, Reference, ExtractedContent and run models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from enricher.models.article import Article, ArticleStats, Reference
from enricher.models.content import ExtractedContent
from enricher.models.pipeline import (
    ArticleOutcome,
    ArticleStage,
    OutcomeStatus,
    PipelineRunStats,
)


class TestArticle:
    def test_defaults(self, make_article) -> None:
        article = make_article()
        assert article.is_updated is False
        assert article.updated_content is None
        assert article.references == []
        assert article.author == "Unknown Author"
        assert len(article.id) == 32

    def test_camel_case_aliases(self) -> None:
        article = Article.model_validate(
            {
                "title": "Chatbots",
                "content": "Body text",
                "sourceUrl": "https://a.com/x",
                "isUpdated": True,
                "updatedContent": "Rewritten",
                "references": [{"title": "Ref", "url": "https://b.com/y"}],
            }
        )
        assert article.is_updated is True
        dumped = article.model_dump(by_alias=True)
        assert dumped["updatedContent"] == "Rewritten"
        assert dumped["sourceUrl"] == "https://a.com/x"

    def test_updated_requires_content_and_references(self, make_article) -> None:
        with pytest.raises(ValidationError, match="isUpdated"):
            make_article(is_updated=True, updated_content="Rewritten")
        with pytest.raises(ValidationError, match="isUpdated"):
            make_article(is_updated=True, references=[Reference(url="https://b.com")])

    def test_enrichment_output_requires_flag(self, make_article) -> None:
        with pytest.raises(ValidationError):
            make_article(updated_content="Rewritten", references=[Reference(url="https://b.com")])

    def test_blank_updated_content_does_not_count(self, make_article) -> None:
        with pytest.raises(ValidationError):
            make_article(is_updated=True, updated_content="   ", references=[Reference(url="https://b.com")])

    @pytest.mark.parametrize("field", ["title", "content", "source_url"])
    def test_required_fields_reject_blank(self, make_article, field: str) -> None:
        with pytest.raises(ValidationError):
            make_article(**{field: "   "})

    def test_title_and_url_trimmed(self, make_article) -> None:
        article = make_article(title="  Padded  ", source_url=" https://a.com/x ")
        assert article.title == "Padded"
        assert article.source_url == "https://a.com/x"

    def test_title_length_limit(self, make_article) -> None:
        with pytest.raises(ValidationError):
            make_article(title="x" * 501)

    def test_frozen(self, make_article) -> None:
        article = make_article()
        with pytest.raises(ValidationError):
            article.title = "changed"


class TestReference:
    def test_url_required(self) -> None:
        with pytest.raises(ValidationError):
            Reference(title="t", url="  ")

    def test_title_optional(self) -> None:
        assert Reference(url="https://b.com").title == ""


class TestArticleStats:
    def test_percentage(self) -> None:
        stats = ArticleStats(total=3, updated=1, not_updated=2)
        assert stats.update_percentage == 33.33
        assert stats.model_dump(by_alias=True)["updatePercentage"] == 33.33

    def test_empty_store(self) -> None:
        assert ArticleStats().update_percentage == 0.0


class TestExtractedContent:
    def test_sufficient_at_threshold(self) -> None:
        assert ExtractedContent(title="t", content="x" * 100, url="u").is_sufficient(100)

    def test_insufficient_below_threshold(self) -> None:
        assert not ExtractedContent(title="t", content="x" * 99, url="u").is_sufficient(100)

    def test_error_is_never_sufficient(self) -> None:
        result = ExtractedContent(title="t", content="x" * 500, url="u", error=True)
        assert not result.is_sufficient(100)


class TestPipelineRunStats:
    def test_record_counts_each_status(self) -> None:
        stats = PipelineRunStats()
        for status in (OutcomeStatus.SUCCESS, OutcomeStatus.SKIPPED, OutcomeStatus.SKIPPED, OutcomeStatus.FAILED):
            stats.record(
                ArticleOutcome(article_id="a", title="t", status=status, stage=ArticleStage.DONE)
            )
        assert (stats.succeeded, stats.skipped, stats.failed, stats.total) == (1, 2, 1, 4)
        assert len(stats.outcomes) == 4

    def test_finish_sets_timestamp(self) -> None:
        stats = PipelineRunStats()
        assert stats.finished_at is None
        stats.finish()
        assert stats.finished_at is not None
        assert stats.finished_at >= stats.started_at
