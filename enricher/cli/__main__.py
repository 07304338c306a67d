"""Allow ``python -m enricher.cli`` execution."""

import sys

from enricher.cli.enrich import main

sys.exit(main())
