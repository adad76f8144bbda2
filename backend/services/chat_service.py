"""Chat orchestration: retrieve context, generate a grounded answer, cite sources."""
import logging
from typing import List, Optional, Sequence

from models.api import HistoryTurn
from models.chunk import Answer, ContextItem
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine

logger = logging.getLogger(__name__)


def dedupe_citations(context: Sequence[ContextItem]) -> List[str]:
    """Unique source URIs in order of first appearance."""
    return list(dict.fromkeys(item.source_uri for item in context))


class ChatService:
    """Answers questions from retrieved context."""

    def __init__(self, retrieval_engine: RetrievalEngine, llm_client: LLMClient):
        self.retrieval_engine = retrieval_engine
        self.llm_client = llm_client
        logger.info("Initialized ChatService")

    def answer(
        self,
        question: str,
        limit: Optional[int] = None,
        history: Optional[List[HistoryTurn]] = None
    ) -> Answer:
        """
        Produce a grounded answer.

        The prompt numbers every retrieved chunk, duplicates included, so the
        model can cite ``[Source n]``; the returned citations are the
        de-duplicated source URIs for display.

        Raises:
            InvalidArgumentError, IntegrationError (incl. LLMClientError)
        """
        context = self.retrieval_engine.retrieve(question, limit)

        prompt = LLMClient.build_prompt(question, context, history)
        llm_response = self.llm_client.generate(prompt)

        citations = dedupe_citations(context)
        logger.info(
            f"Answered with {len(context)} chunks from {len(citations)} sources "
            f"({llm_response.tokens_input}+{llm_response.tokens_output} tokens, "
            f"{llm_response.latency_ms}ms)"
        )

        return Answer(response_text=llm_response.text, citations=citations, context=context)
