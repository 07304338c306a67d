"""REST API over the article store."""
