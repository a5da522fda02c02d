"""Fact ingestion: embed each fact and upsert it as one point."""

from collections.abc import Iterable
from typing import Any

import pydantic

from factrag.embeddings.service import EmbeddingService
from factrag.exceptions import ValidationError
from factrag.ingestion.models import Fact
from factrag.logging_config import get_logger
from factrag.vectorstore.models import Point, PointPayload
from factrag.vectorstore.service import VectorStore

logger = get_logger(__name__)


class FactIngestor:
    """Writes facts into a collection.

    Every fact is embedded and upserted on its own, awaiting the store's
    acknowledgement before returning. Re-ingesting an id replaces the
    stored point as a whole.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        collection: str,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._collection = collection

    @property
    def collection(self) -> str:
        return self._collection

    async def ingest(
        self,
        fact_id: int | str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> Point:
        """Embed a fact and upsert it.

        Args:
            fact_id: Unsigned integer or UUID.
            text: Fact text.
            metadata: Extra payload fields.

        Returns:
            The point as written.

        Raises:
            ValidationError: If the id or text is malformed.
            InvalidInputError: If the embedding service rejects the text.
            EmbeddingError: If the embedding service fails.
            StoreError: If the upsert fails.
        """
        try:
            fact = Fact(id=fact_id, text=text, metadata=metadata or {})
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid fact {fact_id!r}",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e
        return await self.ingest_fact(fact)

    async def ingest_fact(self, fact: Fact) -> Point:
        """Embed and upsert an already validated fact."""
        embedding = await self._embedding_service.embed(fact.text)

        point = Point(
            id=fact.id,
            vector=embedding.embedding,
            payload=PointPayload(text=fact.text, extra=fact.metadata),
        )
        await self._vector_store.upsert(self._collection, [point], wait=True)

        logger.info(
            f"Point with ID {fact.id} has been upserted",
            extra={"collection": self._collection, "dimensions": embedding.dimensions},
        )
        return point

    async def ingest_facts(self, facts: Iterable[Fact]) -> list[Point]:
        """Ingest facts one after another.

        The first failure aborts the rest; facts already written stay.
        """
        return [await self.ingest_fact(fact) for fact in facts]
