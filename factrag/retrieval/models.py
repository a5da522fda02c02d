"""Retrieval data models."""

from typing import Any

from pydantic import BaseModel, Field

from factrag.vectorstore.models import PointId


class RetrievalResult(BaseModel):
    """A fact returned for a query.

    Attributes:
        id: Point identifier of the fact.
        text: The fact text.
        score: Relevance score (higher is more relevant).
        metadata: Additional payload stored with the fact.
    """

    id: PointId = Field(description="Fact identifier")
    text: str = Field(description="Fact text")
    score: float = Field(description="Relevance score")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )
