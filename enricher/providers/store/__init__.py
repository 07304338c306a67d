"""Article record store implementations."""

from enricher.providers.store.http_article_store import HttpArticleStore
from enricher.providers.store.sqlite_article_store import SQLiteArticleStore

__all__ = ["HttpArticleStore", "SQLiteArticleStore"]
