"""Tests for service wiring."""

from unittest.mock import AsyncMock

from factrag.embeddings.service import EmbeddingService
from factrag.llm.client import LLMClient
from factrag.llm.models import GenerationResult, Message
from factrag.services import Services
from factrag.vectorstore.service import QdrantVectorStore

COLLECTION = "facts"


class EchoLLM(LLMClient):
    """Client that answers with the last message and holds no connections."""

    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        return GenerationResult(content=messages[-1].content, model=self.model_name)

    @property
    def model_name(self) -> str:
        return "echo"


class TestServicesClose:
    """Tests for Services.close."""

    async def test_closes_every_handle(self, embedder: EmbeddingService) -> None:
        store = AsyncMock()
        llm = AsyncMock()
        services = Services(
            embedding_service=embedder,
            vector_store=store,
            llm_client=llm,
            collection=COLLECTION,
        )

        await services.close()

        store.close.assert_awaited_once()
        llm.close.assert_awaited_once()

    async def test_handles_without_connections(
        self,
        embedder: EmbeddingService,
        memory_store: QdrantVectorStore,
    ) -> None:
        """Handles that own nothing fall back to the interface's close."""
        services = Services(
            embedding_service=embedder,
            vector_store=memory_store,
            llm_client=EchoLLM(),
            collection=COLLECTION,
        )

        await services.close()

        result = await services.llm_client.generate_text("hello")
        assert result.content == "hello"
