"""Vector store interface and Qdrant implementation."""

import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointIdsList,
    PointStruct,
    UpdateStatus,
    VectorParams,
)

from factrag.config import QdrantSettings, get_settings
from factrag.exceptions import ErrorCode, StoreError, ValidationError
from factrag.logging_config import get_logger
from factrag.observability.metrics import track_vectorstore_operation
from factrag.vectorstore.models import (
    Point,
    PointPayload,
    SearchResult,
    normalize_point_id,
    point_id_sort_key,
)

logger = get_logger(__name__)

DISTANCES = {
    "cosine": Distance.COSINE,
    "dot": Distance.DOT,
}


class VectorStore(ABC):
    """Abstract base class for vector stores.

    Defines the interface for storing, reading and searching points.
    Reading or deleting ids that do not exist is not an error.
    """

    async def close(self) -> None:
        """Release any connections held by the store."""

    @abstractmethod
    async def create_collection(self, name: str, dimensions: int) -> None:
        """Create a new collection.

        Raises:
            StoreError: If the collection exists or creation fails.
        """
        ...

    @abstractmethod
    async def ensure_collection(self, name: str, dimensions: int) -> bool:
        """Create the collection unless it already exists.

        Returns:
            True if the collection was created.

        Raises:
            StoreError: If an existing collection has another dimension.
        """
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Delete a collection.

        Raises:
            StoreError: If the collection does not exist or deletion fails.
        """
        ...

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        """Check if a collection exists."""
        ...

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Count the points stored in a collection."""
        ...

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        points: list[Point],
        wait: bool = True,
    ) -> int:
        """Insert or replace points by id.

        Args:
            collection: Collection name.
            points: Points to write.
            wait: Return only once the write is applied, so that a following
                read observes it.

        Returns:
            Number of points written.

        Raises:
            StoreError: On dimension mismatch or any store failure.
        """
        ...

    @abstractmethod
    async def retrieve(
        self,
        collection: str,
        ids: list[int | str],
    ) -> list[Point]:
        """Read points by id.

        Returns:
            The requested points that exist, in request order. Missing ids
            are left out.

        Raises:
            StoreError: If the read fails.
        """
        ...

    @abstractmethod
    async def delete(
        self,
        collection: str,
        ids: list[int | str],
        wait: bool = True,
    ) -> int:
        """Delete points by id. Missing ids are ignored.

        Returns:
            Number of ids submitted for deletion.

        Raises:
            StoreError: If deletion fails.
        """
        ...

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Returns:
            At most ``limit`` results, best match first. Equal scores are
            ordered by id.

        Raises:
            StoreError: If search fails.
        """
        ...


def _point_ids(ids: list[int | str]) -> list[int | str]:
    try:
        return [normalize_point_id(i) for i in ids]
    except ValueError as e:
        raise ValidationError(str(e), details={"ids": [str(i) for i in ids]}) from e


@contextmanager
def _store_call(operation: str, collection: str) -> Iterator[None]:
    """Time a store call and wrap unexpected failures in StoreError."""
    start = time.perf_counter()
    try:
        yield
    except StoreError:
        track_vectorstore_operation(operation, time.perf_counter() - start, success=False)
        raise
    except Exception as e:
        track_vectorstore_operation(operation, time.perf_counter() - start, success=False)
        logger.error(
            f"Vector store {operation} failed: {e}",
            extra={"collection": collection, "operation": operation},
        )
        raise StoreError(
            f"Failed to {operation}: {e}",
            code=ErrorCode.VECTOR_STORE_ERROR,
            details={"collection": collection, "operation": operation, "error": str(e)},
        ) from e
    track_vectorstore_operation(operation, time.perf_counter() - start)


class QdrantVectorStore(VectorStore):
    """Qdrant vector store implementation."""

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None
        self._dimensions: dict[str, int] = {}

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            if self._settings.location:
                self._client = AsyncQdrantClient(location=self._settings.location)
            elif self._settings.url:
                self._client = AsyncQdrantClient(url=self._settings.url, api_key=api_key)
            else:
                self._client = AsyncQdrantClient(
                    host=self._settings.host,
                    port=self._settings.port,
                    api_key=api_key,
                )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def distance(self) -> Distance:
        return DISTANCES[self._settings.distance]

    async def create_collection(self, name: str, dimensions: int) -> None:
        """Create a new Qdrant collection with the configured distance."""
        client = await self._get_client()

        with _store_call("create collection", name):
            if await client.collection_exists(name):
                raise StoreError(
                    f"Collection already exists: {name}",
                    code=ErrorCode.COLLECTION_EXISTS,
                    details={"collection": name},
                )

            await client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=dimensions, distance=self.distance),
            )
            self._dimensions[name] = dimensions
            logger.info(
                f"Created collection: {name}",
                extra={"dimensions": dimensions, "distance": self._settings.distance},
            )

    async def ensure_collection(self, name: str, dimensions: int) -> bool:
        """Create the collection if missing, else check its dimension."""
        if not await self.collection_exists(name):
            await self.create_collection(name, dimensions)
            return True

        existing = await self._collection_dimensions(name)
        if existing != dimensions:
            raise StoreError(
                f"Collection {name} stores {existing}-dimensional vectors, "
                f"embedding model produces {dimensions}",
                code=ErrorCode.DIMENSION_MISMATCH,
                details={"collection": name, "expected": existing, "actual": dimensions},
            )
        return False

    async def delete_collection(self, name: str) -> None:
        """Delete a Qdrant collection."""
        client = await self._get_client()

        with _store_call("delete collection", name):
            if not await client.collection_exists(name):
                raise StoreError(
                    f"Collection not found: {name}",
                    code=ErrorCode.COLLECTION_NOT_FOUND,
                    details={"collection": name},
                )

            await client.delete_collection(name)
            self._dimensions.pop(name, None)
            logger.info(f"Deleted collection: {name}")

    async def collection_exists(self, name: str) -> bool:
        """Check if collection exists."""
        client = await self._get_client()
        with _store_call("check collection", name):
            return await client.collection_exists(name)

    async def _collection_dimensions(self, name: str) -> int:
        """Vector size of a collection, cached after the first lookup."""
        if name in self._dimensions:
            return self._dimensions[name]

        client = await self._get_client()
        with _store_call("read collection", name):
            if not await client.collection_exists(name):
                raise StoreError(
                    f"Collection not found: {name}",
                    code=ErrorCode.COLLECTION_NOT_FOUND,
                    details={"collection": name},
                )
            info = await client.get_collection(name)
            vectors = info.config.params.vectors
            if not isinstance(vectors, VectorParams):
                raise StoreError(
                    f"Collection {name} uses named vectors, which are not supported",
                    details={"collection": name},
                )
            self._dimensions[name] = vectors.size
        return self._dimensions[name]

    async def count(self, collection: str) -> int:
        """Count points in a collection."""
        client = await self._get_client()
        with _store_call("count", collection):
            result = await client.count(collection_name=collection, exact=True)
            return result.count

    async def upsert(
        self,
        collection: str,
        points: list[Point],
        wait: bool = True,
    ) -> int:
        """Upsert points, rejecting vectors of the wrong size before sending."""
        if not points:
            return 0

        expected = await self._collection_dimensions(collection)
        for point in points:
            if len(point.vector) != expected:
                raise StoreError(
                    f"Point {point.id} has {len(point.vector)} dimensions, "
                    f"collection {collection} expects {expected}",
                    code=ErrorCode.DIMENSION_MISMATCH,
                    details={
                        "collection": collection,
                        "id": point.id,
                        "expected": expected,
                        "actual": len(point.vector),
                    },
                )

        client = await self._get_client()
        with _store_call("upsert", collection):
            result = await client.upsert(
                collection_name=collection,
                points=[
                    PointStruct(
                        id=point.id,
                        vector=point.vector,
                        payload=point.payload.to_qdrant(),
                    )
                    for point in points
                ],
                wait=wait,
            )
            if wait and result.status != UpdateStatus.COMPLETED:
                raise StoreError(
                    f"Upsert was not acknowledged as completed: {result.status}",
                    code=ErrorCode.WRITE_NOT_ACKNOWLEDGED,
                    details={"collection": collection, "status": str(result.status)},
                )

        logger.debug(
            f"Upserted {len(points)} points",
            extra={"collection": collection, "ids": [p.id for p in points]},
        )
        return len(points)

    async def retrieve(
        self,
        collection: str,
        ids: list[int | str],
    ) -> list[Point]:
        """Retrieve points with their vectors and payloads."""
        if not ids:
            return []

        point_ids = _point_ids(ids)
        client = await self._get_client()

        with _store_call("retrieve", collection):
            records = await client.retrieve(
                collection_name=collection,
                ids=point_ids,
                with_payload=True,
                with_vectors=True,
            )

            points: list[Point] = []
            for record in records:
                if not isinstance(record.vector, list):
                    raise StoreError(
                        f"Point {record.id} has no single unnamed vector",
                        details={"collection": collection, "id": record.id},
                    )
                points.append(
                    Point(
                        id=record.id,
                        vector=record.vector,
                        payload=PointPayload.from_qdrant(record.payload),
                    )
                )

        order = {point_id: index for index, point_id in enumerate(point_ids)}
        points.sort(key=lambda p: order.get(p.id, len(order)))

        logger.debug(
            f"Retrieved {len(points)} of {len(point_ids)} points",
            extra={"collection": collection},
        )
        return points

    async def delete(
        self,
        collection: str,
        ids: list[int | str],
        wait: bool = True,
    ) -> int:
        """Delete points by id."""
        if not ids:
            return 0

        point_ids = _point_ids(ids)
        client = await self._get_client()

        with _store_call("delete", collection):
            await client.delete(
                collection_name=collection,
                points_selector=PointIdsList(points=point_ids),
                wait=wait,
            )

        logger.debug(
            f"Deleted {len(point_ids)} points",
            extra={"collection": collection, "ids": point_ids},
        )
        return len(point_ids)

    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Qdrant cuts ties at the limit in its own order, so while the point
        at the cut-off shares its score with the last point fetched, the
        window is doubled until every point at that score is in hand. Then
        the id order decides which of them make the cut.
        """
        if limit < 1:
            return []

        client = await self._get_client()

        query_filter = None
        if filters:
            conditions = [
                FieldCondition(key=k, match=MatchValue(value=v))
                for k, v in filters.items()
            ]
            query_filter = Filter(must=conditions)  # type: ignore[arg-type]

        with _store_call("search", collection):
            fetch = limit
            while True:
                response = await client.query_points(
                    collection_name=collection,
                    query=vector,
                    limit=fetch,
                    query_filter=query_filter,
                    score_threshold=score_threshold,
                    with_payload=True,
                )
                points = response.points
                if len(points) < fetch or points[-1].score != points[limit - 1].score:
                    break
                fetch *= 2

        results = [
            SearchResult(
                id=point.id,
                score=point.score if point.score is not None else 0.0,
                payload=PointPayload.from_qdrant(point.payload),
            )
            for point in points
        ]
        results.sort(key=lambda r: (-r.score, point_id_sort_key(r.id)))
        return results[:limit]
