"""Pytest configuration and shared fixtures."""

import re
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from factrag.api.app import app
from factrag.config import QdrantSettings
from factrag.embeddings.models import EmbeddingResult
from factrag.embeddings.service import EmbeddingService
from factrag.exceptions import InvalidInputError
from factrag.llm.models import GenerationResult
from factrag.services import Services
from factrag.vectorstore.service import QdrantVectorStore

COLLECTION = "facts"


class KeywordEmbeddingService(EmbeddingService):
    """Deterministic embedder: a bias term plus one count per known word."""

    VOCABULARY = [
        "earth",
        "sun",
        "orbits",
        "human",
        "body",
        "bones",
        "eiffel",
        "tower",
        "paris",
        "france",
        "located",
    ]
    DIMENSIONS = len(VOCABULARY) + 1

    def __init__(self) -> None:
        self.calls: list[str] = []

    @property
    def model_name(self) -> str:
        return "keyword-test"

    @property
    def dimensions(self) -> int:
        return self.DIMENSIONS

    async def embed(self, text: str) -> EmbeddingResult:
        if not text.strip():
            raise InvalidInputError("Cannot embed empty text")
        self.calls.append(text)
        words = re.findall(r"[a-z]+", text.lower())
        vector = [1.0] + [float(words.count(w)) for w in self.VOCABULARY]
        return EmbeddingResult(
            text=text,
            embedding=vector,
            model=self.model_name,
            dimensions=len(vector),
        )


def make_mock_llm(content: str = "Generated answer") -> AsyncMock:
    """LLM client mock whose generate_text returns ``content``."""
    llm = AsyncMock()
    llm.model_name = "test-model"
    llm.generate_text = AsyncMock(
        return_value=GenerationResult(
            content=content,
            model="test-model",
            prompt_tokens=50,
            completion_tokens=20,
            total_tokens=70,
        )
    )
    return llm


@pytest.fixture
def embedder() -> KeywordEmbeddingService:
    return KeywordEmbeddingService()


@pytest.fixture
async def memory_store() -> AsyncGenerator[QdrantVectorStore, None]:
    """Qdrant running in-process with an empty ``facts`` collection."""
    store = QdrantVectorStore(settings=QdrantSettings(location=":memory:"))
    await store.create_collection(COLLECTION, dimensions=KeywordEmbeddingService.DIMENSIONS)
    yield store
    await store.close()


@pytest.fixture
def mock_llm() -> AsyncMock:
    return make_mock_llm()


@pytest.fixture
def services(
    embedder: KeywordEmbeddingService,
    memory_store: QdrantVectorStore,
    mock_llm: AsyncMock,
) -> Services:
    return Services(
        embedding_service=embedder,
        vector_store=memory_store,
        llm_client=mock_llm,
        collection=COLLECTION,
    )


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    The lifespan does not run under ASGITransport, so no services are
    configured unless a test installs them.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
