"""Embedding data models."""

from typing import Self

from pydantic import BaseModel, Field, model_validator


class EmbeddingResult(BaseModel):
    """A text and the vector the embedding model produced for it.

    The vector is never empty, and ``dimensions`` always equals its length.
    That length is the vector size a collection must be created with.

    Attributes:
        text: The text that was embedded.
        embedding: The embedding vector.
        model: Embedding model that produced the vector.
        dimensions: Length of ``embedding``.
    """

    text: str = Field(description="Embedded text")
    embedding: list[float] = Field(min_length=1, description="Embedding vector")
    model: str = Field(description="Embedding model")
    dimensions: int = Field(gt=0, description="Vector length")

    @model_validator(mode="after")
    def _dimensions_match_vector(self) -> Self:
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )
        return self

    @classmethod
    def from_vector(cls, text: str, vector: list[float], model: str) -> Self:
        """Build a result whose dimensions are read off the vector."""
        return cls(text=text, embedding=vector, model=model, dimensions=len(vector))
