"""API routes for facts and grounded answers."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from factrag.logging_config import get_logger
from factrag.rag.models import RAGQuery, RAGResponse
from factrag.services import Services
from factrag.vectorstore.models import Point, PointId

logger = get_logger(__name__)


router = APIRouter(prefix="/api/v1", tags=["Facts"])


class FactRequest(BaseModel):
    """Request body for storing a fact."""

    text: str = Field(min_length=1, description="Fact text")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )


class FactResponse(BaseModel):
    """A stored fact."""

    id: PointId = Field(description="Fact identifier")
    text: str = Field(description="Fact text")
    metadata: dict[str, Any] = Field(description="Additional metadata")


class DeleteResponse(BaseModel):
    """Result of a delete. Deleting a missing fact also succeeds."""

    id: PointId = Field(description="Fact identifier")
    deleted: bool = Field(description="Whether the delete was applied")


class QueryRequest(BaseModel):
    """Request body for a grounded answer."""

    question: str = Field(description="Question to answer")
    top_k: int = Field(default=3, ge=1, le=20, description="Number of facts")
    score_threshold: float | None = Field(
        default=None,
        description="Similarity cut-off; omit to keep the nearest facts",
    )


class QueryResponse(BaseModel):
    """A grounded answer."""

    answer: str = Field(description="Generated answer")
    grounded: bool = Field(description="Whether facts were found")
    sources: list[dict[str, Any]] = Field(description="Source attributions")
    model: str | None = Field(description="Model used")
    tokens_used: int = Field(description="Tokens consumed")


def get_services(request: Request) -> Services:
    """Service handles built in the application lifespan."""
    services: Services | None = getattr(request.app.state, "services", None)
    if services is None:
        logger.warning("Services not configured - rejecting request")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Services not configured",
                "message": "Requires the embedding service, vector store and LLM",
            },
        )
    return services


@router.put("/facts/{fact_id}", response_model=FactResponse)
async def put_fact(
    fact_id: str,
    request: FactRequest,
    services: Services = Depends(get_services),
) -> FactResponse:
    """Store a fact, replacing any fact with the same id."""
    point = await services.ingestor.ingest(fact_id, request.text, request.metadata)
    return point_to_fact_response(point)


@router.get("/facts/{fact_id}", response_model=FactResponse)
async def get_fact(
    fact_id: str,
    services: Services = Depends(get_services),
) -> FactResponse:
    """Read a fact back by id."""
    points = await services.vector_store.retrieve(services.collection, [fact_id])
    if not points:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Fact not found", "id": fact_id},
        )
    return point_to_fact_response(points[0])


@router.delete("/facts/{fact_id}", response_model=DeleteResponse)
async def delete_fact(
    fact_id: str,
    services: Services = Depends(get_services),
) -> DeleteResponse:
    """Delete a fact by id."""
    await services.vector_store.delete(services.collection, [fact_id])
    return DeleteResponse(id=fact_id, deleted=True)


@router.post("/query", response_model=QueryResponse)
async def query_endpoint(
    request: QueryRequest,
    services: Services = Depends(get_services),
) -> QueryResponse:
    """Answer a question from the stored facts."""
    response = await services.pipeline.query(query_request_to_rag_query(request))
    return rag_response_to_query_response(response)


def point_to_fact_response(point: Point) -> FactResponse:
    """Convert a stored Point to a FactResponse."""
    return FactResponse(
        id=point.id,
        text=point.payload.text,
        metadata=point.payload.extra,
    )


def rag_response_to_query_response(rag_response: RAGResponse) -> QueryResponse:
    """Convert internal RAGResponse to API QueryResponse."""
    return QueryResponse(
        answer=rag_response.answer,
        grounded=rag_response.grounded,
        sources=[
            {"id": s.id, "text": s.text, "score": s.score}
            for s in rag_response.sources
        ],
        model=rag_response.model,
        tokens_used=rag_response.tokens_used,
    )


def query_request_to_rag_query(request: QueryRequest) -> RAGQuery:
    """Convert API QueryRequest to internal RAGQuery."""
    return RAGQuery(
        question=request.question,
        top_k=request.top_k,
        score_threshold=request.score_threshold,
    )
