"""
History-Aware Retriever Module

Rewrites a conversational follow-up ("what about the second one?") into a
standalone search query, then searches the embedding index with it.

Rules:
- Empty history: the raw input is the search query, no model call.
- Rephrase call fails: log a warning and search with the raw input.
- Empty rephrase: search with the raw input.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from faq_bot.exceptions import CompletionServiceError
from faq_bot.llm_service import LLMService
from faq_bot.memory import Message
from faq_bot.prompts import REPHRASE_INSTRUCTION
from faq_bot.vector_store import EmbeddingIndex, SearchResult

logger = logging.getLogger(__name__)


@dataclass
class RetrievalResult:
    """
    Outcome of one rephrase-and-retrieve step.

    Attributes:
        query: The raw user input
        search_query: The text actually sent to the index
        rephrased: Whether search_query came from the model
        results: Retrieved chunks, best first
    """
    query: str
    search_query: str
    rephrased: bool = False
    results: List[SearchResult] = field(default_factory=list)


class HistoryAwareRetriever:
    """
    Produces a standalone search query from the conversation and retrieves
    the top-k chunks for it.

    Example:
        retriever = HistoryAwareRetriever(llm_service, top_k=4)
        result = retriever.rephrase_and_retrieve(history, "and the price?", index)
        print(result.search_query, len(result.results))
    """

    def __init__(self, llm_service: LLMService, top_k: int = 4):
        self.llm_service = llm_service
        self.top_k = top_k

    def build_rephrase_messages(self, history: Sequence[Message], query: str) -> List[Message]:
        """History, then the new input, then the rewrite instruction."""
        return [*history, Message.user(query), Message.user(REPHRASE_INSTRUCTION)]

    def rephrase(self, history: Sequence[Message], query: str) -> str:
        """
        Turn the latest input into a standalone search query.

        Args:
            history: Previous turns, oldest first
            query: The new user input

        Returns:
            The search query (the raw input when no rewrite is possible)
        """
        if not history:
            return query

        try:
            response = self.llm_service.chat(self.build_rephrase_messages(history, query))
        except CompletionServiceError as e:
            logger.warning(f"Query rephrase failed, searching with raw input: {e.message}")
            return query

        search_query = response.content.strip()
        if not search_query:
            logger.warning("Query rephrase returned nothing, searching with raw input")
            return query

        logger.debug(f"Rephrased query: {search_query!r}")
        return search_query

    def rephrase_and_retrieve(
        self,
        history: Sequence[Message],
        query: str,
        index: EmbeddingIndex,
        top_k: Optional[int] = None,
    ) -> RetrievalResult:
        """
        Rephrase the input against the history and search the index.

        Raises:
            EmbeddingServiceError: If the search query can't be embedded
        """
        search_query = self.rephrase(history, query)
        results = index.search(search_query, k=self.top_k if top_k is None else top_k)

        logger.info(f"Retrieved {len(results)} chunks for search query {search_query!r}")

        return RetrievalResult(
            query=query,
            search_query=search_query,
            rephrased=search_query != query,
            results=results,
        )
