"""Tests for fact and query API routes."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from factrag.api.app import app
from factrag.api.routes import (
    QueryRequest,
    query_request_to_rag_query,
    rag_response_to_query_response,
)
from factrag.exceptions import ErrorCode, LLMError
from factrag.rag import NO_INFORMATION_ANSWER, RAGResponse, SourceAttribution
from factrag.services import Services


@pytest.fixture
def installed(services: Services) -> Iterator[Services]:
    app.state.services = services
    yield services
    app.state.services = None


class TestServicesNotConfigured:
    """Routes answer 503 until the lifespan has built the services."""

    async def test_query_unavailable(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/query", json={"question": "Hi?"})

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "Services not configured"

    async def test_fact_unavailable(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/facts/1")
        assert response.status_code == 503


class TestFactRoutes:
    """Tests for /api/v1/facts."""

    async def test_put_then_get(self, client: AsyncClient, installed: Services) -> None:
        put = await client.put(
            "/api/v1/facts/2",
            json={"text": "The human body contains 206 bones.", "metadata": {"topic": "anatomy"}},
        )
        assert put.status_code == 200
        assert put.json()["id"] == 2

        get = await client.get("/api/v1/facts/2")

        assert get.status_code == 200
        assert get.json() == {
            "id": 2,
            "text": "The human body contains 206 bones.",
            "metadata": {"topic": "anatomy"},
        }

    async def test_delete_then_get(self, client: AsyncClient, installed: Services) -> None:
        await client.put("/api/v1/facts/1", json={"text": "The Earth orbits the Sun."})

        delete = await client.delete("/api/v1/facts/1")
        get = await client.get("/api/v1/facts/1")

        assert delete.status_code == 200
        assert delete.json() == {"id": 1, "deleted": True}
        assert get.status_code == 404

    async def test_delete_missing(self, client: AsyncClient, installed: Services) -> None:
        """Deleting an unknown id still succeeds."""
        response = await client.delete("/api/v1/facts/99")
        assert response.status_code == 200

    async def test_invalid_id(self, client: AsyncClient, installed: Services) -> None:
        response = await client.put("/api/v1/facts/not-an-id", json={"text": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == ErrorCode.VALIDATION_ERROR.value

    @pytest.mark.parametrize("method", ["get", "delete"])
    async def test_id_beyond_uint64(
        self,
        client: AsyncClient,
        installed: Services,
        method: str,
    ) -> None:
        response = await client.request(method, f"/api/v1/facts/{2**64}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == ErrorCode.VALIDATION_ERROR.value

    async def test_put_id_beyond_uint64(self, client: AsyncClient, installed: Services) -> None:
        response = await client.put(f"/api/v1/facts/{2**64}", json={"text": "x"})
        assert response.status_code == 400

    async def test_empty_text(self, client: AsyncClient, installed: Services) -> None:
        response = await client.put("/api/v1/facts/1", json={"text": ""})
        assert response.status_code == 422

    async def test_uuid_id(self, client: AsyncClient, installed: Services) -> None:
        fact_id = "6f9619ff-8b86-d011-b42d-00cf4fc964ff"
        await client.put(f"/api/v1/facts/{fact_id}", json={"text": "The Earth orbits the Sun."})

        response = await client.get(f"/api/v1/facts/{fact_id.upper()}")

        assert response.status_code == 200
        assert response.json()["id"] == fact_id


class TestQueryRoute:
    """Tests for /api/v1/query."""

    async def test_grounded_answer(
        self,
        client: AsyncClient,
        installed: Services,
        mock_llm: AsyncMock,
    ) -> None:
        await client.put("/api/v1/facts/1", json={"text": "The Earth orbits the Sun."})
        await client.put("/api/v1/facts/2", json={"text": "The human body contains 206 bones."})

        response = await client.post(
            "/api/v1/query",
            json={"question": "How many bones are in the human body?", "top_k": 1},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["answer"] == "Generated answer"
        assert data["grounded"] is True
        assert [s["id"] for s in data["sources"]] == [2]
        assert data["tokens_used"] == 70

    async def test_no_information(
        self,
        client: AsyncClient,
        installed: Services,
        mock_llm: AsyncMock,
    ) -> None:
        response = await client.post("/api/v1/query", json={"question": "Anything?"})

        data = response.json()
        assert data["answer"] == NO_INFORMATION_ANSWER
        assert data["grounded"] is False
        assert data["model"] is None
        mock_llm.generate_text.assert_not_called()

    async def test_llm_failure_maps_to_502(
        self,
        client: AsyncClient,
        installed: Services,
        mock_llm: AsyncMock,
    ) -> None:
        mock_llm.generate_text.side_effect = LLMError("down")
        await client.put("/api/v1/facts/1", json={"text": "The Earth orbits the Sun."})

        response = await client.post("/api/v1/query", json={"question": "Does the Earth orbit?"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == ErrorCode.LLM_SERVICE_ERROR.value

    async def test_top_k_bounds(self, client: AsyncClient, installed: Services) -> None:
        response = await client.post("/api/v1/query", json={"question": "q", "top_k": 0})
        assert response.status_code == 422

    @pytest.mark.parametrize(("threshold", "grounded"), [(-1.0, True), (2.0, False)])
    async def test_any_score_threshold_accepted(
        self,
        client: AsyncClient,
        installed: Services,
        threshold: float,
        grounded: bool,
    ) -> None:
        await client.put("/api/v1/facts/1", json={"text": "The Earth orbits the Sun."})

        response = await client.post(
            "/api/v1/query",
            json={"question": "Does the Earth orbit?", "score_threshold": threshold},
        )

        assert response.status_code == 200
        assert response.json()["grounded"] is grounded


class TestConverters:
    """Tests for request/response converters."""

    def test_query_request_to_rag_query(self) -> None:
        query = query_request_to_rag_query(
            QueryRequest(question="Where?", top_k=2, score_threshold=0.4)
        )
        assert query.question == "Where?"
        assert query.top_k == 2
        assert query.score_threshold == 0.4

    def test_rag_response_to_query_response(self) -> None:
        response = rag_response_to_query_response(
            RAGResponse(
                answer="Paris.",
                grounded=True,
                sources=[SourceAttribution(id=3, text="In Paris.", score=0.8)],
                model="gpt-3.5-turbo",
                tokens_used=12,
            )
        )
        assert response.sources == [{"id": 3, "text": "In Paris.", "score": 0.8}]
        assert response.model == "gpt-3.5-turbo"
