"""
Vector Store Module

Request-scoped, in-memory nearest-neighbour index over FAQ chunks.

Design:
- IndexBuilder is the seam the pipeline depends on. InMemoryIndexBuilder
  rebuilds a fresh index on every call (simplicity over performance); a
  cached or incremental builder can be swapped in without touching the
  endpoint.
- EmbeddingIndex is immutable after build. Vectors are L2-normalized once so
  the inner product is the cosine similarity.
- Ties are broken by insertion order (stable sort).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

import numpy as np

from faq_bot.chunker import Chunk
from faq_bot.embeddings import EmbeddingService

# Configure logging
logger = logging.getLogger(__name__)


class SearchResult:
    """
    Represents a single search result.

    Attributes:
        chunk: The retrieved Chunk object
        score: Cosine similarity (-1 to 1, higher is better)
        rank: Position in results (1-indexed)
    """

    def __init__(self, chunk: Chunk, score: float, rank: int = 0):
        self.chunk = chunk
        self.score = score
        self.rank = rank

    def __repr__(self) -> str:
        return (
            f"SearchResult(question='{self.chunk.question}', "
            f"score={self.score:.4f}, rank={self.rank})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (diagnostic context in API responses)."""
        return {
            "text": self.chunk.text,
            "metadata": dict(self.chunk.metadata),
            "score": self.score,
            "rank": self.rank,
        }


def _normalize(vectors: np.ndarray) -> np.ndarray:
    """Normalize rows for cosine similarity."""
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1  # Avoid division by zero
    return vectors / norms


class EmbeddingIndex:
    """
    Immutable in-memory index of chunk embeddings.

    Build it through an IndexBuilder rather than directly.

    Example:
        index = InMemoryIndexBuilder(embedding_service).build(chunks)
        for result in index.search("How do I reset my password?", k=4):
            print(result.score, result.chunk.text)
    """

    def __init__(
        self,
        chunks: Sequence[Chunk],
        vectors: np.ndarray,
        embedding_service: EmbeddingService,
    ):
        if len(chunks) != len(vectors):
            raise ValueError(
                f"Got {len(vectors)} vectors for {len(chunks)} chunks"
            )

        self._chunks = tuple(chunks)
        self._vectors = _normalize(vectors) if len(chunks) else vectors
        self._vectors.setflags(write=False)
        self._embedding_service = embedding_service

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def chunks(self) -> List[Chunk]:
        """Indexed chunks in insertion order."""
        return list(self._chunks)

    def search(self, query: str, k: int = 4) -> List[SearchResult]:
        """
        Find the k chunks most similar to a query.

        Args:
            query: Search text (embedded with the same model as the chunks)
            k: Maximum number of results

        Returns:
            Up to k SearchResult objects ordered by non-increasing score

        Raises:
            EmbeddingServiceError: If the query can't be embedded
        """
        if not self._chunks:
            logger.warning("Search on empty index")
            return []
        if k <= 0 or not query.strip():
            return []

        query_vector = np.array([self._embedding_service.embed_query(query)], dtype=np.float32)
        query_vector = _normalize(query_vector)[0]

        scores = self._vectors @ query_vector
        # Stable sort on negated scores keeps insertion order for ties
        order = np.argsort(-scores, kind="stable")[:k]

        results = [
            SearchResult(chunk=self._chunks[idx], score=float(scores[idx]), rank=rank)
            for rank, idx in enumerate(order, 1)
        ]

        logger.debug(f"Search returned {len(results)} results")
        return results


class IndexBuilder(ABC):
    """Builds a searchable EmbeddingIndex from chunks."""

    @abstractmethod
    def build(self, chunks: Sequence[Chunk]) -> EmbeddingIndex:
        """
        Build an index over the given chunks.

        Raises:
            EmbeddingServiceError: If the chunk embeddings can't be computed
        """
        pass


class InMemoryIndexBuilder(IndexBuilder):
    """
    Embeds every chunk in one batched call and returns a brand new index.

    Nothing is kept between calls, so each chat request gets its own index.
    """

    def __init__(self, embedding_service: EmbeddingService):
        self.embedding_service = embedding_service

    def build(self, chunks: Sequence[Chunk]) -> EmbeddingIndex:
        if not chunks:
            logger.warning("Building index with no chunks")
            return EmbeddingIndex([], np.zeros((0, 0), dtype=np.float32), self.embedding_service)

        logger.info(f"Generating embeddings for {len(chunks)} chunks")
        vectors = self.embedding_service.embed_documents([c.text for c in chunks])

        index = EmbeddingIndex(
            chunks,
            np.array(vectors, dtype=np.float32),
            self.embedding_service,
        )
        logger.info(f"Built in-memory index with {len(index)} chunks")
        return index
