"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env).
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration.

    Targets the OpenAI embeddings API or anything that speaks its protocol.
    """

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_", populate_by_name=True)

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Embedding API base URL",
    )
    model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model name",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("EMBEDDING_API_KEY", "OPENAI_API_KEY"),
        description="Bearer credential for the embedding API",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )
    max_input_chars: int = Field(
        default=32_000,
        description="Longest text accepted before a request is attempted",
    )


class LLMSettings(BaseSettings):
    """Chat completion service configuration."""

    model_config = SettingsConfigDict(env_prefix="LLM_", populate_by_name=True)

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Chat completions API base URL",
    )
    model: str = Field(
        default="gpt-3.5-turbo",
        description="Model name to use for generation",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("LLM_API_KEY", "OPENAI_API_KEY"),
        description="Bearer credential for the completion API",
    )
    timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds",
    )
    max_tokens: int = Field(
        default=512,
        description="Maximum tokens in response",
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature (lower = more deterministic)",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration.

    ``location`` wins over ``url``, which wins over ``host``/``port``.
    """

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    host: str = Field(default="localhost", description="Qdrant host")
    port: int = Field(default=6333, description="Qdrant REST port")
    url: str | None = Field(
        default=None,
        description="Full Qdrant URL, overrides host and port",
    )
    location: str | None = Field(
        default=None,
        description="Embedded local mode, e.g. ':memory:'",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="example_collection",
        description="Collection holding the facts",
    )
    distance: Literal["cosine", "dot"] = Field(
        default="cosine",
        description="Similarity metric used when creating the collection",
    )


class RAGSettings(BaseSettings):
    """Retrieval and grounding parameters."""

    model_config = SettingsConfigDict(env_prefix="RAG_")

    top_k: int = Field(default=3, ge=1, le=20, description="Facts per question")
    score_threshold: float | None = Field(
        default=None,
        description="Similarity cut-off applied by the store; unset keeps every match",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)
    rag: RAGSettings = Field(default_factory=RAGSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
