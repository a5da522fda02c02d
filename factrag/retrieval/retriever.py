"""Retriever interface and implementations."""

from abc import ABC, abstractmethod
from typing import Any

from factrag.embeddings.service import EmbeddingService
from factrag.logging_config import get_logger
from factrag.observability.metrics import track_retrieval_request
from factrag.retrieval.models import RetrievalResult
from factrag.vectorstore.service import VectorStore

logger = get_logger(__name__)


class Retriever(ABC):
    """Abstract base class for retrievers."""

    @abstractmethod
    async def retrieve(
        self,
        query: str,
        top_k: int = 3,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[RetrievalResult]:
        """Retrieve relevant facts for a query.

        Args:
            query: The search query.
            top_k: Maximum number of results to return.
            filters: Optional payload filters.
            score_threshold: Similarity cut-off applied by the store. None
                uses the retriever's default, which may be no cut-off at all.

        Returns:
            List of retrieval results ordered by relevance. Empty when
            nothing matches; that is not an error.
        """
        ...

    async def retrieve_facts(self, query: str, k: int = 3) -> list[str]:
        """Texts of the ``k`` most relevant facts, best first."""
        return [result.text for result in await self.retrieve(query, top_k=k)]


class SemanticRetriever(Retriever):
    """Semantic search retriever using embeddings and vector store.

    Embeds the query and finds the nearest points in the store. Any score
    threshold is enforced by the store. Failures from either service
    propagate unchanged.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        collection: str,
        score_threshold: float | None = None,
    ) -> None:
        """Initialize the semantic retriever.

        Args:
            embedding_service: Service for generating embeddings.
            vector_store: Vector database for similarity search.
            collection: Name of the collection to search.
            score_threshold: Default threshold passed to the store. None
                returns the nearest facts whatever their score.
        """
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._collection = collection
        self._score_threshold = score_threshold

    async def retrieve(
        self,
        query: str,
        top_k: int = 3,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[RetrievalResult]:
        """Retrieve facts using semantic similarity."""
        if not query.strip():
            return []

        if score_threshold is None:
            score_threshold = self._score_threshold

        embedding_result = await self._embedding_service.embed(query)

        search_results = await self._vector_store.search(
            collection=self._collection,
            vector=embedding_result.embedding,
            limit=top_k,
            filters=filters,
            score_threshold=score_threshold,
        )

        results = [
            RetrievalResult(
                id=sr.id,
                text=sr.payload.text,
                score=sr.score,
                metadata=sr.payload.extra,
            )
            for sr in search_results
        ]

        track_retrieval_request(
            facts_returned=len(results),
            top_score=results[0].score if results else None,
        )
        logger.debug(
            f"Retrieved {len(results)} facts for query",
            extra={
                "query_length": len(query),
                "top_k": top_k,
                "results_count": len(results),
            },
        )

        return results
