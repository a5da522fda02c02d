"""Explicit wiring of the service handles.

Every component takes its collaborators as constructor arguments; this
module is the one place that builds them, either from settings or from
handles supplied by the caller (fakes in tests).
"""

from factrag.config import Settings, get_settings
from factrag.embeddings.service import EmbeddingService, OpenAIEmbeddingService
from factrag.ingestion.service import FactIngestor
from factrag.llm.client import LLMClient, OpenAICompatibleClient
from factrag.logging_config import get_logger
from factrag.rag.pipeline import DEFAULT_TOP_K, RAGPipeline
from factrag.retrieval.retriever import SemanticRetriever
from factrag.vectorstore.service import QdrantVectorStore, VectorStore

logger = get_logger(__name__)


class Services:
    """Service handles sharing one embedding client, store and LLM client."""

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        llm_client: LLMClient,
        collection: str,
        top_k: int = DEFAULT_TOP_K,
        score_threshold: float | None = None,
    ) -> None:
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.llm_client = llm_client
        self.collection = collection

        self.ingestor = FactIngestor(
            embedding_service=embedding_service,
            vector_store=vector_store,
            collection=collection,
        )
        self.retriever = SemanticRetriever(
            embedding_service=embedding_service,
            vector_store=vector_store,
            collection=collection,
            score_threshold=score_threshold,
        )
        self.pipeline = RAGPipeline(
            retriever=self.retriever,
            llm_client=llm_client,
            top_k=top_k,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Services":
        """Build the OpenAI and Qdrant backed services."""
        settings = settings or get_settings()
        return cls(
            embedding_service=OpenAIEmbeddingService(settings=settings.embedding),
            vector_store=QdrantVectorStore(settings=settings.qdrant),
            llm_client=OpenAICompatibleClient(settings=settings.llm),
            collection=settings.qdrant.collection_name,
            top_k=settings.rag.top_k,
            score_threshold=settings.rag.score_threshold,
        )

    async def ensure_collection(self) -> bool:
        """Create the collection sized for the embedding model if missing.

        Returns:
            True if the collection was created.
        """
        created = await self.vector_store.ensure_collection(
            self.collection,
            self.embedding_service.dimensions,
        )
        if created:
            logger.info(
                f"Collection {self.collection} created",
                extra={"dimensions": self.embedding_service.dimensions},
            )
        return created

    async def close(self) -> None:
        """Close the embedding service, vector store and LLM client."""
        await self.embedding_service.close()
        await self.vector_store.close()
        await self.llm_client.close()
