"""Grounded answer data models."""

from pydantic import BaseModel, Field

from factrag.vectorstore.models import PointId


class SourceAttribution(BaseModel):
    """A fact the answer was grounded in.

    Attributes:
        id: Fact identifier.
        text: Fact text as given to the model.
        score: Relevance score.
    """

    id: PointId = Field(description="Fact identifier")
    text: str = Field(description="Fact text")
    score: float = Field(description="Relevance score")


class RAGQuery(BaseModel):
    """Input for a grounded answer.

    Attributes:
        question: The user's question.
        top_k: Number of facts to retrieve.
        score_threshold: Similarity cut-off, or None for the retriever default.
            Dot-product scores are unbounded, so no range is imposed.
    """

    question: str = Field(description="User question")
    top_k: int = Field(default=3, ge=1, le=20, description="Facts to retrieve")
    score_threshold: float | None = Field(
        default=None,
        description="Similarity cut-off applied by the store",
    )


class RAGResponse(BaseModel):
    """A grounded answer.

    Attributes:
        answer: Generated answer, or the fixed no-information answer.
        grounded: Whether facts were found and the model was asked.
        sources: Facts used as context.
        model: LLM model used, or None when the model was not called.
        tokens_used: Total tokens consumed.
    """

    answer: str = Field(description="Generated answer")
    grounded: bool = Field(description="Whether the answer came from facts")
    sources: list[SourceAttribution] = Field(
        default_factory=list,
        description="Source attributions",
    )
    model: str | None = Field(default=None, description="LLM model used")
    tokens_used: int = Field(default=0, description="Total tokens consumed")
