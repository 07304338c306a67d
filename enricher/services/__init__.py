"""Pipeline stage services.

    - reference_discovery.py  - search, denylist, dedupe, rank
    - content_extractor.py    - render a page and pull out title and body
    - content_synthesizer.py  - build the rewrite prompt and call the model
    - persistence.py          - commit results to the primary or fallback store
    - article_seeder.py       - create unprocessed articles from source pages
"""

from enricher.services.article_seeder import ArticleSeeder
from enricher.services.content_extractor import ContentExtractor
from enricher.services.content_synthesizer import ContentSynthesizer, build_prompt
from enricher.services.persistence import PersistenceAdapter
from enricher.services.reference_discovery import ReferenceDiscovery

__all__ = [
    "ArticleSeeder",
    "ContentExtractor",
    "ContentSynthesizer",
    "PersistenceAdapter",
    "ReferenceDiscovery",
    "build_prompt",
]
