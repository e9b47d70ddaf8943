"""Semantic indexing and search for meeting records."""

__version__ = "0.1.0"
