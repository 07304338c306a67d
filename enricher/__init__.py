"""Article enricher.

Takes articles that have been collected into a record store and, one at a
time, finds competing articles on the same topic, extracts their text, asks
a generative model for an improved rewrite, and commits the rewrite back
with its references.
"""

__version__ = "1.0.0"
