"""LLM client interface and OpenAI-compatible implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from factrag.config import LLMSettings, get_settings
from factrag.exceptions import ErrorCode, InvalidInputError, LLMError
from factrag.llm.models import GenerationResult, Message, Role
from factrag.logging_config import get_logger
from factrag.observability.metrics import track_llm_request

logger = get_logger(__name__)

# Fragments the OpenAI API uses when a prompt is too long for the model
_CONTEXT_LENGTH_MARKERS = ("context_length_exceeded", "maximum context length")


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text from messages.

        Args:
            messages: Conversation messages.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens override.

        Returns:
            GenerationResult with generated text.

        Raises:
            InvalidInputError: If the prompt is rejected as malformed or too long.
            LLMError: If generation fails.
        """
        ...

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text from a user prompt and an optional system prompt."""
        messages: list[Message] = []

        if system_prompt:
            messages.append(Message(role=Role.SYSTEM, content=system_prompt))

        messages.append(Message(role=Role.USER, content=prompt))

        return await self.generate(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...

    async def close(self) -> None:
        """Release any connections held by the client."""


class OpenAICompatibleClient(LLMClient):
    """LLM client for OpenAI-compatible chat completion APIs.

    Works with:
    - OpenAI API
    - Ollama (localhost:11434/v1)
    - vLLM
    - Any OpenAI-compatible endpoint
    """

    def __init__(
        self,
        settings: LLMSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            settings: LLM configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().llm
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text using the chat completions API."""
        client = await self._get_client()
        url = f"{self._settings.base_url}/chat/completions"

        payload = {
            "model": self._settings.model,
            "messages": [msg.to_api() for msg in messages],
            "temperature": (
                self._settings.temperature if temperature is None else temperature
            ),
            "max_tokens": self._settings.max_tokens if max_tokens is None else max_tokens,
        }

        headers = {}
        api_key = self._settings.api_key.get_secret_value()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            self._track_failure(start)
            logger.error(f"LLM request timed out: {e}")
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            self._track_failure(start)
            raise self._status_error(e.response) from e

        except httpx.RequestError as e:
            self._track_failure(start)
            logger.error(f"LLM connection error: {e}")
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            choice = data["choices"][0]
            usage = data.get("usage") or {}

            result = GenerationResult(
                content=choice["message"]["content"] or "",
                model=data.get("model", self._settings.model),
                finish_reason=choice.get("finish_reason"),
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            )
        except (KeyError, IndexError, TypeError) as e:
            self._track_failure(start)
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        track_llm_request(
            model=result.model,
            duration=time.perf_counter() - start,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
        )
        return result

    def _track_failure(self, start: float) -> None:
        track_llm_request(
            model=self._settings.model,
            duration=time.perf_counter() - start,
            prompt_tokens=0,
            completion_tokens=0,
            success=False,
        )

    def _status_error(self, response: httpx.Response) -> InvalidInputError | LLMError:
        status = response.status_code
        logger.error(f"LLM request failed: {status}")
        details = {"status_code": status, "service": "completion"}

        if status == 400:
            body = response.text or ""
            if any(marker in body for marker in _CONTEXT_LENGTH_MARKERS):
                return InvalidInputError(
                    "Prompt exceeds the model context length",
                    code=ErrorCode.LLM_CONTEXT_LENGTH,
                    details=details,
                )
            return InvalidInputError("LLM service rejected the request", details=details)

        if status in (401, 403):
            return LLMError(
                f"LLM service refused the credential ({status})",
                code=ErrorCode.LLM_AUTH_ERROR,
                details=details,
            )

        if status == 429:
            return LLMError(
                "Rate limit exceeded",
                code=ErrorCode.LLM_RATE_LIMIT,
                details=details,
            )

        return LLMError(
            f"LLM service returned {status}",
            code=ErrorCode.LLM_SERVICE_ERROR,
            details=details,
        )
