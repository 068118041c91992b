"""
Answer Composer Module

Stuffs the retrieved chunks into the system prompt and asks the model for
the final answer.

The completion is returned verbatim. Nothing checks that the model actually
used the refusal phrases when it should have.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from faq_bot.llm_service import LLMService
from faq_bot.memory import Message
from faq_bot.prompts import CONTEXT_SEPARATOR, build_answer_system_prompt
from faq_bot.vector_store import SearchResult

logger = logging.getLogger(__name__)


@dataclass
class ComposedAnswer:
    """The model's answer plus generation info."""
    answer: str
    model: str
    usage: Optional[Dict[str, int]] = None


class AnswerComposer:
    """
    Builds the answer prompt and invokes the model once.

    Example:
        composer = AnswerComposer(llm_service, domain="Strapi")
        composed = composer.compose(history, "How do I add a field?", results)
        print(composed.answer)
    """

    def __init__(self, llm_service: LLMService, domain: str = "Strapi"):
        self.llm_service = llm_service
        self.domain = domain

    def build_context(self, results: Sequence[SearchResult]) -> str:
        """Join retrieved chunk texts, best first."""
        return CONTEXT_SEPARATOR.join(r.chunk.text for r in results)

    def build_messages(
        self,
        history: Sequence[Message],
        query: str,
        results: Sequence[SearchResult],
    ) -> List[Message]:
        """System prompt with stuffed context, full history, then the input."""
        system_prompt = build_answer_system_prompt(self.domain, self.build_context(results))
        return [Message.system(system_prompt), *history, Message.user(query)]

    def compose(
        self,
        history: Sequence[Message],
        query: str,
        results: Sequence[SearchResult],
    ) -> ComposedAnswer:
        """
        Generate the answer from the retrieved context.

        Args:
            history: Previous turns, oldest first
            query: The new user input
            results: Retrieved chunks (may be empty)

        Returns:
            ComposedAnswer with the raw completion text

        Raises:
            CompletionServiceError: If the model call fails
        """
        if not results:
            logger.info("Composing answer with no retrieved context")

        response = self.llm_service.chat(self.build_messages(history, query, results))

        logger.info(f"LLM response received | answer_length={len(response.content)}")
        return ComposedAnswer(
            answer=response.content,
            model=response.model,
            usage=response.usage,
        )
