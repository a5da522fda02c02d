"""Vector store module."""

from factrag.vectorstore.models import Point, PointId, PointPayload, SearchResult
from factrag.vectorstore.service import QdrantVectorStore, VectorStore

__all__ = [
    "Point",
    "PointId",
    "PointPayload",
    "QdrantVectorStore",
    "SearchResult",
    "VectorStore",
]
