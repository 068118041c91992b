"""
RAG Chain Module

Orchestrates the Retrieval-Augmented Generation pipeline for one request:
1. Fetch the FAQ corpus
2. Chunk it
3. Build a fresh embedding index
4. Rephrase the query against the history and retrieve top-k chunks
5. Compose the answer with the LLM

RAG Pipeline Flow:
    FAQ API → FAQEntry list → Chunks → EmbeddingIndex
    → (history + input) → search query → Top-K Chunks
    → [System prompt + Context + History + Input] → LLM → Answer

Every stage runs sequentially. Nothing is shared between requests.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from config.settings import Settings
from faq_bot.chunker import FAQChunker
from faq_bot.composer import AnswerComposer
from faq_bot.embeddings import EmbeddingService
from faq_bot.faq_source import FAQSource
from faq_bot.llm_service import LLMService
from faq_bot.logging_config import log_latency
from faq_bot.memory import Message
from faq_bot.retriever import HistoryAwareRetriever
from faq_bot.vector_store import IndexBuilder, InMemoryIndexBuilder

logger = logging.getLogger(__name__)


@dataclass
class RAGResponse:
    """
    Complete response from the RAG chain.

    Attributes:
        answer: The generated answer text
        input: The original user input
        search_query: Query actually used for retrieval
        context: Retrieved chunks (text, question, score)
        metadata: Timings, corpus size, model info
    """
    answer: str
    input: str
    search_query: str
    context: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (for API response)."""
        return {
            "answer": self.answer,
            "input": self.input,
            "search_query": self.search_query,
            "context": self.context,
            "metadata": self.metadata,
        }


class RAGChain:
    """
    Main RAG Chain that wires the pipeline stages together.

    Each stage is a plain object passed in explicitly, so tests (and future
    cached implementations) can replace any of them.

    Example:
        chain = create_rag_chain(Settings.from_env())
        response = chain.answer(history=[], query="What is Strapi?")
        print(response.answer)
    """

    def __init__(
        self,
        source: FAQSource,
        chunker: FAQChunker,
        index_builder: IndexBuilder,
        retriever: HistoryAwareRetriever,
        composer: AnswerComposer,
    ):
        self.source = source
        self.chunker = chunker
        self.index_builder = index_builder
        self.retriever = retriever
        self.composer = composer

    @log_latency("rag.answer")
    def answer(self, history: Sequence[Message], query: str) -> RAGResponse:
        """
        Answer a question through the full pipeline.

        Args:
            history: Previous turns, oldest first
            query: The new user input

        Returns:
            RAGResponse with the answer and diagnostic fields

        Raises:
            EmbeddingServiceError: If corpus or query embedding fails
            CompletionServiceError: If the answer generation fails
        """
        timings: Dict[str, float] = {}
        start = time.perf_counter()

        # Step 1: Fetch corpus (degrades to [] if the source is down)
        entries = self.source.fetch()
        timings["fetch"] = time.perf_counter() - start

        # Step 2: Chunk
        stage = time.perf_counter()
        chunks = self.chunker.split(entries)
        timings["chunk"] = time.perf_counter() - stage

        # Step 3: Build the request-scoped index
        stage = time.perf_counter()
        index = self.index_builder.build(chunks)
        timings["index"] = time.perf_counter() - stage

        # Step 4: Rephrase + retrieve
        stage = time.perf_counter()
        retrieval = self.retriever.rephrase_and_retrieve(history, query, index)
        timings["retrieval"] = time.perf_counter() - stage

        # Step 5: Compose the answer
        stage = time.perf_counter()
        composed = self.composer.compose(history, query, retrieval.results)
        timings["generation"] = time.perf_counter() - stage

        timings["total"] = time.perf_counter() - start

        response = RAGResponse(
            answer=composed.answer,
            input=query,
            search_query=retrieval.search_query,
            context=[r.to_dict() for r in retrieval.results],
            metadata={
                "rephrased": retrieval.rephrased,
                "faq_entries": len(entries),
                "chunks_indexed": len(chunks),
                "chunks_found": len(retrieval.results),
                "model": composed.model,
                "usage": composed.usage,
                "timings": {k: round(v, 4) for k, v in timings.items()},
            },
        )

        logger.info(
            f"RAG query completed in {timings['total']:.2f}s "
            f"(entries={len(entries)}, chunks={len(chunks)}, "
            f"found={len(retrieval.results)}, rephrased={retrieval.rephrased})"
        )
        return response


def create_rag_chain(
    settings: Settings,
    llm_service: Optional[LLMService] = None,
    embedding_service: Optional[EmbeddingService] = None,
) -> RAGChain:
    """
    Factory function to create a fully configured RAG chain.

    Args:
        settings: Application settings
        llm_service: Optional pre-built LLM service
        embedding_service: Optional pre-built embedding service

    Returns:
        Configured RAGChain instance
    """
    llm_service = llm_service or LLMService(config=settings.llm)
    embedding_service = embedding_service or EmbeddingService(config=settings.embedding)

    return RAGChain(
        source=FAQSource(config=settings.source),
        chunker=FAQChunker(config=settings.chunking),
        index_builder=InMemoryIndexBuilder(embedding_service),
        retriever=HistoryAwareRetriever(llm_service, top_k=settings.retrieval.top_k),
        composer=AnswerComposer(llm_service, domain=settings.assistant.domain),
    )
