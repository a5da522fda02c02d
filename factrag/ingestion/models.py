"""Ingestion data models."""

from typing import Any

from pydantic import BaseModel, Field

from factrag.vectorstore.models import PointId


class Fact(BaseModel):
    """A short text fact supplied by the caller.

    Attributes:
        id: Caller-chosen id, unique within the collection.
        text: The fact itself.
        metadata: Extra payload stored next to the text.
    """

    id: PointId = Field(description="Fact identifier")
    text: str = Field(min_length=1, description="Fact text")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )
