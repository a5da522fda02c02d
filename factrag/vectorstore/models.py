"""Vector store data models."""

from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field

MAX_INT_ID = 2**64 - 1


def normalize_point_id(value: object) -> int | str:
    """Coerce a point id to a form Qdrant accepts.

    Qdrant ids are unsigned 64-bit integers or UUIDs. Digit-only strings
    become integers and UUIDs are returned in canonical lowercase form.

    Raises:
        ValueError: If the value is neither.
    """
    if isinstance(value, bool):
        raise ValueError("point id must be an unsigned integer or a UUID")
    if isinstance(value, int):
        if not 0 <= value <= MAX_INT_ID:
            raise ValueError(f"point id must be between 0 and {MAX_INT_ID}: {value}")
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, str):
        if value.isdigit():
            return normalize_point_id(int(value))
        try:
            return str(UUID(value))
        except ValueError:
            pass
    raise ValueError(f"point id must be an unsigned integer or a UUID: {value!r}")


PointId = Annotated[int | str, BeforeValidator(normalize_point_id)]


def point_id_sort_key(point_id: int | str) -> tuple[int, int | str]:
    """Order ids with integers first, then UUID strings."""
    if isinstance(point_id, int):
        return (0, point_id)
    return (1, point_id)


class PointPayload(BaseModel):
    """Metadata stored alongside a vector.

    Attributes:
        text: The original fact text.
        extra: Open extension map for any other metadata.
    """

    text: str = Field(description="Original fact text")
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )

    def to_qdrant(self) -> dict[str, Any]:
        """Flatten into the stored payload, with ``text`` always winning."""
        return {**self.extra, "text": self.text}

    @classmethod
    def from_qdrant(cls, payload: dict[str, Any] | None) -> "PointPayload":
        """Rebuild from a stored payload. A missing text reads as empty."""
        data = dict(payload or {})
        text = data.pop("text", "")
        return cls(text=str(text), extra=data)


class Point(BaseModel):
    """A point in the vector database.

    Attributes:
        id: Unsigned integer or UUID.
        vector: The embedding vector.
        payload: Fact text plus metadata.
    """

    id: PointId = Field(description="Point identifier")
    vector: list[float] = Field(description="Embedding vector")
    payload: PointPayload = Field(description="Point payload")


class SearchResult(BaseModel):
    """Result from a vector similarity search.

    Attributes:
        id: Point identifier.
        score: Similarity score (higher is more similar).
        payload: Stored payload.
    """

    id: PointId = Field(description="Point identifier")
    score: float = Field(description="Similarity score")
    payload: PointPayload = Field(description="Point payload")
