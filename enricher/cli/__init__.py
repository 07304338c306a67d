# =============================================================================
# enricher/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line tools for operating the article enricher outside the web
# server.  Everything lives in enrich.py:
#
#   run    Enrich a batch of unprocessed articles and print the run report.
#   stats  Show how many stored articles have been enriched.
#   check  Verify that the configured providers have working credentials.
#
# Heavy imports (providers, FastAPI app) are deferred inside the command
# functions so that --help stays fast.
# =============================================================================

"""CLI tools for the article enricher (``python -m enricher.cli``)."""
