"""Prompt templates for grounded answers."""

from abc import ABC, abstractmethod
from typing import Any


class PromptTemplate(ABC):
    """Abstract base class for prompt templates."""

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the template with provided variables."""
        ...


class RAGPromptTemplate(PromptTemplate):
    """Prompt template that grounds an answer in knowledge-base facts.

    The system prompt restricts the assistant to the facts; the user turn
    carries the facts, one per line, followed by the question.
    """

    DEFAULT_SYSTEM_PROMPT = (
        "You are an assistant that answers questions based on facts from a "
        "knowledge base. Answer only from the facts you are given. If they do "
        "not contain the answer, say so."
    )

    DEFAULT_USER_TEMPLATE = (
        "Here are some relevant facts:\n{context}\n\n"
        "Please respond to the following question: {question}"
    )

    def __init__(
        self,
        system_prompt: str | None = None,
        user_template: str | None = None,
        separator: str = "\n",
    ) -> None:
        """Initialize the template.

        Args:
            system_prompt: Custom system prompt.
            user_template: Custom user template with ``{context}`` and
                ``{question}`` placeholders.
            separator: Joins facts into the context block.
        """
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT
        self.user_template = user_template or self.DEFAULT_USER_TEMPLATE
        self.separator = separator

    def format(self, **kwargs: Any) -> str:
        """Format the user template. Needs ``context`` and ``question``."""
        return self.user_template.format(**kwargs)

    def format_context(self, facts: list[str]) -> str:
        """Join fact texts into one context block."""
        return self.separator.join(facts)

    def build_prompt(self, question: str, facts: list[str]) -> tuple[str, str]:
        """Build the system and user prompts for a question.

        Returns:
            Tuple of (system_prompt, user_prompt).
        """
        context = self.format_context(facts)
        return self.system_prompt, self.format(context=context, question=question)
