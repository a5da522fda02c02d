"""Tests for the demonstration run."""

from unittest.mock import AsyncMock

import pytest

from factrag.config import QdrantSettings
from factrag.demo import (
    DEMO_FACTS,
    FIRST_QUESTION,
    SECOND_QUESTION,
    read_points,
    run_demo,
)
from factrag.exceptions import LLMError
from factrag.rag import NO_INFORMATION_ANSWER
from factrag.services import Services
from factrag.vectorstore.service import QdrantVectorStore


class TestRunDemo:
    """Tests for run_demo against embedded Qdrant."""

    async def test_full_sequence(self, services: Services, mock_llm: AsyncMock) -> None:
        report = await run_demo(services)

        assert report.collection_created is False
        assert report.ingested == [1, 2, 3]

        assert report.first_answer.grounded is True
        assert report.first_answer.sources[0].id == 2
        assert [p.id for p in report.read_back] == [1, 2]
        assert report.deleted == [1, 2]
        assert report.read_after_delete == []

        assert report.second_answer.sources[0].id == 3
        assert [s.id for s in report.second_answer.sources] == [3]
        assert [p.id for p in report.second_read_back] == [3]

        assert await services.vector_store.count("facts") == 0

    async def test_model_sees_relevant_fact(
        self,
        services: Services,
        mock_llm: AsyncMock,
    ) -> None:
        await run_demo(services)

        assert mock_llm.generate_text.call_count == 2
        first, second = mock_llm.generate_text.call_args_list
        assert "The human body contains 206 bones." in first.kwargs["prompt"]
        assert FIRST_QUESTION in first.kwargs["prompt"]
        assert "The Eiffel Tower is located in Paris, France." in second.kwargs["prompt"]
        assert "206 bones" not in second.kwargs["prompt"]
        assert SECOND_QUESTION in second.kwargs["prompt"]

    async def test_creates_missing_collection(
        self,
        embedder,
        mock_llm: AsyncMock,
    ) -> None:
        store = QdrantVectorStore(settings=QdrantSettings(location=":memory:"))
        services = Services(embedder, store, mock_llm, collection="new_facts")
        try:
            report = await run_demo(services)
        finally:
            await store.close()

        assert report.collection_created is True

    async def test_no_facts(self, services: Services, mock_llm: AsyncMock) -> None:
        """With nothing ingested both questions get the fixed answer."""
        report = await run_demo(services, facts=[])

        assert report.first_answer.answer == NO_INFORMATION_ANSWER
        assert report.second_answer.answer == NO_INFORMATION_ANSWER
        mock_llm.generate_text.assert_not_called()

    async def test_failure_aborts(self, services: Services, mock_llm: AsyncMock) -> None:
        """A failing step stops the run; facts written before it stay."""
        mock_llm.generate_text.side_effect = LLMError("down")

        with pytest.raises(LLMError):
            await run_demo(services)

        assert await services.vector_store.count("facts") == len(DEMO_FACTS)


class TestReadPoints:
    """Tests for per-id reads."""

    async def test_missing_ids_skipped(self, services: Services) -> None:
        await services.ingestor.ingest(1, "The Earth orbits the Sun.")

        points = await read_points(services, [1, 2])

        assert [p.id for p in points] == [1]
