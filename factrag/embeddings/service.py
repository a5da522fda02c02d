"""Embedding service interface and OpenAI-style HTTP implementation."""

import time
from abc import ABC, abstractmethod

import httpx
import pydantic

from factrag.config import EmbeddingSettings, get_settings
from factrag.embeddings.models import EmbeddingResult
from factrag.exceptions import EmbeddingError, ErrorCode, InvalidInputError
from factrag.logging_config import get_logger
from factrag.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Turns one text into one fixed-length vector. Implementations must not
    retry; callers decide what to do with a failure.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Non-empty text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            InvalidInputError: If the text is empty or too long.
            EmbeddingError: If the service fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...

    async def close(self) -> None:
        """Release any connections held by the service."""


class OpenAIEmbeddingService(EmbeddingService):
    """Embedding service using the OpenAI ``/embeddings`` HTTP API.

    Also works against text-embeddings-inference (TEI) and other servers
    exposing the same request/response shape.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "BAAI/bge-large-en-v1.5": 1024,
        "BAAI/bge-base-en-v1.5": 768,
        "BAAI/bge-small-en-v1.5": 384,
    }

    # Statuses meaning "the service rejected this input"
    INVALID_INPUT_STATUSES = frozenset({400, 413, 422})

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None
        self._dimensions: int | None = self.MODEL_DIMENSIONS.get(self._settings.model)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions.

        Known models report their size up front; otherwise the size is
        learned from the first response.

        Raises:
            EmbeddingError: If the size is not known yet.
        """
        if self._dimensions is None:
            raise EmbeddingError(
                f"Dimensions of {self._settings.model} are unknown until "
                "the first embedding is generated",
                code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                details={"model": self._settings.model},
            )
        return self._dimensions

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            return {}
        return {"Authorization": f"Bearer {api_key}"}

    def _validate_input(self, text: str) -> None:
        if not text.strip():
            raise InvalidInputError(
                "Cannot embed empty text",
                details={"service": "embedding"},
            )
        if len(text) > self._settings.max_input_chars:
            raise InvalidInputError(
                f"Text of {len(text)} characters exceeds the "
                f"{self._settings.max_input_chars} character limit",
                code=ErrorCode.EMBEDDING_INPUT_TOO_LONG,
                details={
                    "service": "embedding",
                    "length": len(text),
                    "limit": self._settings.max_input_chars,
                },
            )

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text with one HTTP request."""
        self._validate_input(text)

        client = await self._get_client()
        url = f"{self._settings.base_url}/embeddings"
        payload = {"model": self._settings.model, "input": text}

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_embedding_request(
                self._settings.model, time.perf_counter() - start, success=False
            )
            raise self._status_error(e.response, url) from e
        except httpx.RequestError as e:
            track_embedding_request(
                self._settings.model, time.perf_counter() - start, success=False
            )
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        track_embedding_request(self._settings.model, time.perf_counter() - start)
        return self._parse_response(response, text)

    def _status_error(
        self, response: httpx.Response, url: str
    ) -> InvalidInputError | EmbeddingError:
        status = response.status_code
        logger.error(
            f"Embedding request failed: {status}",
            extra={"url": url, "status": status},
        )
        details = {"status_code": status, "service": "embedding"}

        if status in self.INVALID_INPUT_STATUSES:
            return InvalidInputError(
                f"Embedding service rejected the input ({status})",
                details=details,
            )
        if status in (401, 403):
            return EmbeddingError(
                f"Embedding service refused the credential ({status})",
                code=ErrorCode.EMBEDDING_AUTH_ERROR,
                details=details,
            )
        if status == 429:
            return EmbeddingError(
                "Embedding service rate limit exceeded",
                code=ErrorCode.EMBEDDING_RATE_LIMIT,
                details=details,
            )
        return EmbeddingError(
            f"Embedding service returned {status}",
            code=ErrorCode.EMBEDDING_SERVICE_ERROR,
            details=details,
        )

    def _parse_response(self, response: httpx.Response, text: str) -> EmbeddingResult:
        try:
            data = response.json()
            embedding = [float(x) for x in data["data"][0]["embedding"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        try:
            result = EmbeddingResult.from_vector(text, embedding, self._settings.model)
        except pydantic.ValidationError as e:
            raise EmbeddingError(
                "Embedding service returned an empty vector",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"model": self._settings.model},
            ) from e

        if self._dimensions is None:
            self._dimensions = len(embedding)
        elif len(embedding) != self._dimensions:
            raise EmbeddingError(
                f"Expected {self._dimensions} dimensions from "
                f"{self._settings.model}, got {len(embedding)}",
                code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                details={"expected": self._dimensions, "actual": len(embedding)},
            )

        return result
