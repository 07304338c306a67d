"""Concrete adapters for the interfaces in ``enricher.interfaces``."""
