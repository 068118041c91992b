"""
Tests for the request-scoped embedding index.

Uses the hashing fake from conftest, so no model is loaded.
"""

from unittest.mock import Mock

import numpy as np
import pytest

from faq_bot.chunker import Chunk
from faq_bot.exceptions import EmbeddingServiceError
from faq_bot.vector_store import EmbeddingIndex, InMemoryIndexBuilder, SearchResult


def _chunks(*texts):
    return [
        Chunk(text=t, metadata={"question": t.split("\n")[0]}, chunk_index=i)
        for i, t in enumerate(texts)
    ]


class TestSearchResult:
    """Tests for SearchResult."""

    def test_to_dict(self):
        """Diagnostic dict has text, metadata, score and rank."""
        chunk = Chunk(text="Q\nA", metadata={"question": "Q"})
        data = SearchResult(chunk=chunk, score=0.5, rank=1).to_dict()

        assert data == {"text": "Q\nA", "metadata": {"question": "Q"}, "score": 0.5, "rank": 1}


class TestInMemoryIndexBuilder:
    """Tests for building the index."""

    def test_build_embeds_in_one_batch(self, embedding_service):
        """All chunk texts go through a single embed_documents call."""
        index = InMemoryIndexBuilder(embedding_service).build(_chunks("a b", "c d", "e f"))

        assert len(index) == 3
        assert embedding_service.document_calls == 1

    def test_build_empty(self, embedding_service):
        """No chunks gives an empty index without calling the embedder."""
        index = InMemoryIndexBuilder(embedding_service).build([])

        assert len(index) == 0
        assert embedding_service.document_calls == 0

    def test_each_build_is_fresh(self, embedding_service):
        """Two builds share nothing."""
        builder = InMemoryIndexBuilder(embedding_service)

        first = builder.build(_chunks("a b"))
        second = builder.build(_chunks("c d", "e f"))

        assert len(first) == 1
        assert len(second) == 2
        assert embedding_service.document_calls == 2

    def test_embedding_failure_propagates(self):
        """Embedding errors are not swallowed by the builder."""
        service = Mock()
        service.embed_documents.side_effect = EmbeddingServiceError("quota exceeded")

        with pytest.raises(EmbeddingServiceError):
            InMemoryIndexBuilder(service).build(_chunks("a b"))


class TestEmbeddingIndex:
    """Tests for EmbeddingIndex.search."""

    @pytest.fixture
    def index(self, embedding_service, faq_entries):
        chunks = _chunks(*(e.text for e in faq_entries))
        return InMemoryIndexBuilder(embedding_service).build(chunks)

    def test_most_relevant_first(self, index):
        """The chunk sharing the most words ranks first."""
        results = index.search("Which databases are supported?", k=4)

        assert results[0].chunk.question == "Which databases are supported?"
        assert results[0].rank == 1

    def test_at_most_k_results(self, index):
        """Result count never exceeds k or the index size."""
        assert len(index.search("admin password", k=2)) == 2
        assert len(index.search("admin password", k=10)) == 3

    def test_scores_non_increasing(self, index):
        """Results are ordered best first."""
        scores = [r.score for r in index.search("admin content type", k=3)]

        assert scores == sorted(scores, reverse=True)
        assert [r.rank for r in index.search("admin content type", k=3)] == [1, 2, 3]

    def test_ties_keep_insertion_order(self, embedding_service):
        """Equal scores are returned in the order chunks were added."""
        index = InMemoryIndexBuilder(embedding_service).build(
            _chunks("same words here", "something unrelated", "same words here")
        )

        results = index.search("same words here", k=2)

        assert [r.chunk.chunk_index for r in results] == [0, 2]
        assert results[0].score == results[1].score

    def test_empty_index_returns_nothing(self, embedding_service):
        """Searching an empty index does not call the embedder."""
        index = InMemoryIndexBuilder(embedding_service).build([])

        assert index.search("anything", k=4) == []
        assert embedding_service.query_calls == 0

    @pytest.mark.parametrize("query,k", [("admin", 0), ("admin", -1), ("", 4), ("   ", 4)])
    def test_degenerate_queries(self, index, embedding_service, query, k):
        """Blank queries and non-positive k return no results."""
        assert index.search(query, k=k) == []
        assert embedding_service.query_calls == 0

    def test_vectors_are_read_only(self, index):
        """The index can't be modified after build."""
        with pytest.raises(ValueError):
            index._vectors[0, 0] = 1.0

    def test_mismatched_vectors_rejected(self, embedding_service):
        """Each chunk needs exactly one vector."""
        with pytest.raises(ValueError):
            EmbeddingIndex(_chunks("a", "b"), np.ones((1, 4)), embedding_service)

    def test_query_embedding_failure_propagates(self, index):
        """Query embedding errors reach the caller."""
        index._embedding_service = Mock()
        index._embedding_service.embed_query.side_effect = EmbeddingServiceError("down")

        with pytest.raises(EmbeddingServiceError):
            index.search("admin", k=4)
