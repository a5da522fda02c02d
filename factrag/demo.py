"""Demonstration run: ingest, answer, read back, delete, answer again.

Each step awaits the previous one. The first failure aborts the run and
propagates to the caller; nothing written before it is rolled back.
"""

from pydantic import BaseModel, Field

from factrag.ingestion.models import Fact
from factrag.logging_config import get_logger
from factrag.rag.models import RAGQuery, RAGResponse
from factrag.services import Services
from factrag.vectorstore.models import Point, PointId

logger = get_logger(__name__)

DEMO_FACTS = [
    Fact(id=1, text="The Earth orbits the Sun."),
    Fact(id=2, text="The human body contains 206 bones."),
    Fact(id=3, text="The Eiffel Tower is located in Paris, France."),
]

FIRST_QUESTION = "How many bones are in the human body?"
SECOND_QUESTION = "Where is the Eiffel Tower located?"


class DemoReport(BaseModel):
    """What each step of the demonstration returned."""

    collection_created: bool = Field(description="Collection created by this run")
    ingested: list[PointId] = Field(description="Ids written")
    first_answer: RAGResponse = Field(description="Answer to the first question")
    read_back: list[Point] = Field(description="Points 1 and 2 before deletion")
    deleted: list[PointId] = Field(description="Ids deleted after the first answer")
    read_after_delete: list[Point] = Field(description="Points 1 and 2 after deletion")
    second_answer: RAGResponse = Field(description="Answer to the second question")
    second_read_back: list[Point] = Field(description="Point 3 before deletion")


async def read_points(services: Services, ids: list[PointId]) -> list[Point]:
    """Read ids one at a time, logging the ones that are gone."""
    found: list[Point] = []
    for point_id in ids:
        points = await services.vector_store.retrieve(services.collection, [point_id])
        if not points:
            logger.info(f"No point found with ID {point_id}. It may have been deleted.")
        else:
            logger.info(
                f"Retrieved point {point_id}",
                extra={"text": points[0].payload.text},
            )
        found.extend(points)
    return found


async def delete_points(services: Services, ids: list[PointId]) -> list[PointId]:
    await services.vector_store.delete(services.collection, ids, wait=True)
    logger.info(f"Deleted points {ids}", extra={"collection": services.collection})
    return ids


async def ask(services: Services, question: str) -> RAGResponse:
    response = await services.pipeline.query(
        RAGQuery(question=question, top_k=services.pipeline.top_k)
    )
    logger.info(f"Generated response: {response.answer}")
    return response


async def run_demo(
    services: Services,
    facts: list[Fact] | None = None,
) -> DemoReport:
    """Run the demonstration sequence against the given services."""
    facts = DEMO_FACTS if facts is None else facts

    created = await services.ensure_collection()

    points = await services.ingestor.ingest_facts(facts)
    first_answer = await ask(services, FIRST_QUESTION)

    read_back = await read_points(services, [1, 2])
    deleted = await delete_points(services, [1, 2])
    read_after_delete = await read_points(services, [1, 2])

    second_answer = await ask(services, SECOND_QUESTION)
    second_read_back = await read_points(services, [3])
    await delete_points(services, [3])

    return DemoReport(
        collection_created=created,
        ingested=[p.id for p in points],
        first_answer=first_answer,
        read_back=read_back,
        deleted=deleted,
        read_after_delete=read_after_delete,
        second_answer=second_answer,
        second_read_back=second_read_back,
    )
