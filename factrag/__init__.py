"""Retrieval-augmented answers over a small fact store."""

__version__ = "0.1.0"
