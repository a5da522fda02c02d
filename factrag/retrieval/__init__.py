"""Retrieval module."""

from factrag.retrieval.models import RetrievalResult
from factrag.retrieval.retriever import Retriever, SemanticRetriever

__all__ = [
    "Retriever",
    "RetrievalResult",
    "SemanticRetriever",
]
