"""LLM client module."""

from factrag.llm.client import LLMClient, OpenAICompatibleClient
from factrag.llm.models import GenerationResult, Message, Role
from factrag.llm.prompts import PromptTemplate, RAGPromptTemplate

__all__ = [
    "GenerationResult",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
    "PromptTemplate",
    "RAGPromptTemplate",
    "Role",
]
