"""Fact ingestion module."""

from factrag.ingestion.models import Fact
from factrag.ingestion.service import FactIngestor

__all__ = [
    "Fact",
    "FactIngestor",
]
