"""Grounded answer pipeline."""

from factrag.llm.client import LLMClient
from factrag.llm.prompts import RAGPromptTemplate
from factrag.logging_config import get_logger
from factrag.observability.metrics import track_rag_query
from factrag.rag.models import RAGQuery, RAGResponse, SourceAttribution
from factrag.retrieval.retriever import Retriever

logger = get_logger(__name__)

NO_INFORMATION_ANSWER = "I could not find any relevant information."

DEFAULT_TOP_K = 3


class RAGPipeline:
    """Answers questions from retrieved facts.

    Retrieval comes first. Without facts the pipeline answers with
    NO_INFORMATION_ANSWER and never calls the model; otherwise it sends a
    single completion request.
    """

    def __init__(
        self,
        retriever: Retriever,
        llm_client: LLMClient,
        prompt_template: RAGPromptTemplate | None = None,
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        """Initialize the pipeline.

        Args:
            retriever: Fact retriever.
            llm_client: LLM client for generation.
            prompt_template: Prompt template for grounding.
            top_k: Facts retrieved by ``answer``.
        """
        self._retriever = retriever
        self._llm_client = llm_client
        self._prompt_template = prompt_template or RAGPromptTemplate()
        self._top_k = top_k

    @property
    def top_k(self) -> int:
        return self._top_k

    async def query(self, request: RAGQuery) -> RAGResponse:
        """Answer a question from the most relevant facts.

        Raises:
            InvalidInputError, ServiceError, StoreError: Propagated unchanged
                from retrieval or generation.
        """
        logger.info(
            "Processing question",
            extra={"question_length": len(request.question), "top_k": request.top_k},
        )

        results = await self._retriever.retrieve(
            query=request.question,
            top_k=request.top_k,
            score_threshold=request.score_threshold,
        )

        if not results:
            logger.info("No relevant facts found in the database")
            track_rag_query(answered=False)
            return RAGResponse(answer=NO_INFORMATION_ANSWER, grounded=False)

        system_prompt, user_prompt = self._prompt_template.build_prompt(
            question=request.question,
            facts=[r.text for r in results],
        )

        generation = await self._llm_client.generate_text(
            prompt=user_prompt,
            system_prompt=system_prompt,
        )
        track_rag_query(answered=True)

        logger.info(
            "Question answered",
            extra={
                "fact_ids": [r.id for r in results],
                "tokens_used": generation.total_tokens,
            },
        )

        return RAGResponse(
            answer=generation.content,
            grounded=True,
            sources=[
                SourceAttribution(id=r.id, text=r.text, score=r.score) for r in results
            ],
            model=generation.model,
            tokens_used=generation.total_tokens,
        )

    async def answer(self, question: str) -> str:
        """Answer text for a question, using the configured top K."""
        response = await self.query(RAGQuery(question=question, top_k=self._top_k))
        return response.answer
