"""Grounded answer module."""

from factrag.rag.models import RAGQuery, RAGResponse, SourceAttribution
from factrag.rag.pipeline import NO_INFORMATION_ANSWER, RAGPipeline

__all__ = [
    "NO_INFORMATION_ANSWER",
    "RAGPipeline",
    "RAGQuery",
    "RAGResponse",
    "SourceAttribution",
]
