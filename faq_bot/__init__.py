"""
FAQ Chatbot - Core Package

This package contains the retrieval-augmented FAQ pipeline:
- FAQSource: Fetches and normalizes FAQ records from the content API
- FAQChunker: Splits FAQ entries into overlapping chunks
- EmbeddingService: Embedding provider abstraction (OpenAI / local)
- EmbeddingIndex / IndexBuilder: Request-scoped in-memory vector search
- LLMService: Chat model provider abstraction (OpenAI/Ollama/Gemini/Mistral)
- HistoryAwareRetriever: Standalone query rewriting + retrieval
- AnswerComposer: Context stuffing + answer generation
- RAGChain: Orchestrates the pipeline per request
- create_app: FastAPI application for the chat widget
"""

from .exceptions import (
    FAQBotError,
    SourceUnavailable,
    EmbeddingServiceError,
    CompletionServiceError,
    MalformedRequest,
)
from .faq_source import FAQSource, FAQEntry
from .chunker import FAQChunker, Chunk
from .embeddings import EmbeddingService
from .vector_store import EmbeddingIndex, IndexBuilder, InMemoryIndexBuilder, SearchResult
from .llm_service import LLMService, LLMResponse
from .memory import Message
from .retriever import HistoryAwareRetriever, RetrievalResult
from .composer import AnswerComposer, ComposedAnswer
from .rag_chain import RAGChain, RAGResponse, create_rag_chain

__all__ = [
    # Errors
    "FAQBotError",
    "SourceUnavailable",
    "EmbeddingServiceError",
    "CompletionServiceError",
    "MalformedRequest",
    # Corpus
    "FAQSource",
    "FAQEntry",
    "FAQChunker",
    "Chunk",
    # Retrieval
    "EmbeddingService",
    "EmbeddingIndex",
    "IndexBuilder",
    "InMemoryIndexBuilder",
    "SearchResult",
    "HistoryAwareRetriever",
    "RetrievalResult",
    # Generation
    "LLMService",
    "LLMResponse",
    "Message",
    "AnswerComposer",
    "ComposedAnswer",
    # Pipeline
    "RAGChain",
    "RAGResponse",
    "create_rag_chain",
]
