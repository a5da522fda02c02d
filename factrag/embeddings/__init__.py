"""Embedding service module."""

from factrag.embeddings.models import EmbeddingResult
from factrag.embeddings.service import EmbeddingService, OpenAIEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "OpenAIEmbeddingService",
]
