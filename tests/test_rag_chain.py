"""
Tests for RAG Chain Module

Tests for RAGChain and RAGResponse with a mocked FAQ source and LLM.
"""

import pytest
from unittest.mock import Mock

from config.settings import Settings
from faq_bot.chunker import FAQChunker
from faq_bot.composer import AnswerComposer
from faq_bot.exceptions import CompletionServiceError, EmbeddingServiceError
from faq_bot.faq_source import FAQEntry, FAQSource
from faq_bot.llm_service import LLMResponse
from faq_bot.memory import Message
from faq_bot.rag_chain import RAGChain, RAGResponse, create_rag_chain
from faq_bot.retriever import HistoryAwareRetriever
from faq_bot.vector_store import InMemoryIndexBuilder


@pytest.fixture
def source(faq_entries):
    source = Mock(spec=FAQSource)
    source.fetch.return_value = faq_entries
    return source


@pytest.fixture
def chain(source, embedding_service, mock_llm_service):
    return RAGChain(
        source=source,
        chunker=FAQChunker(chunk_size=100, chunk_overlap=20),
        index_builder=InMemoryIndexBuilder(embedding_service),
        retriever=HistoryAwareRetriever(mock_llm_service, top_k=4),
        composer=AnswerComposer(mock_llm_service, domain="Strapi"),
    )


class TestRAGResponse:
    """Tests for RAGResponse dataclass."""

    def test_response_to_dict(self):
        """Test serialization to dictionary."""
        response = RAGResponse(
            answer="Answer",
            input="Question",
            search_query="Question",
            context=[{"text": "chunk", "score": 0.9}],
            metadata={"timings": {"total": 1.5}},
        )

        d = response.to_dict()

        assert d["answer"] == "Answer"
        assert d["input"] == "Question"
        assert d["context"][0]["text"] == "chunk"
        assert d["metadata"]["timings"]["total"] == 1.5


class TestRAGChain:
    """Tests for RAGChain.answer."""

    def test_first_turn(self, chain, source, embedding_service, mock_llm_service):
        """One fetch, one batch embedding, one query embedding, one completion."""
        response = chain.answer([], "Which databases are supported?")

        assert response.answer == "Generated response"
        assert response.search_query == "Which databases are supported?"
        source.fetch.assert_called_once()
        assert embedding_service.document_calls == 1
        assert embedding_service.query_calls == 1
        mock_llm_service.chat.assert_called_once()

    def test_context_reaches_the_prompt(self, chain, mock_llm_service):
        """The best chunk is stuffed into the answer system prompt."""
        chain.answer([], "Which databases are supported?")

        system_prompt = mock_llm_service.chat.call_args.args[0][0].content
        assert "SQLite, PostgreSQL, MySQL and MariaDB are supported." in system_prompt

    def test_diagnostics(self, chain, faq_entries):
        """Metadata reports corpus size, retrieval and timings."""
        response = chain.answer([], "How do I reset the admin password?")

        meta = response.metadata
        assert meta["faq_entries"] == len(faq_entries)
        assert meta["chunks_indexed"] >= len(faq_entries)
        assert meta["chunks_found"] == len(response.context) <= 4
        assert meta["rephrased"] is False
        assert meta["model"] == "test-model"
        assert set(meta["timings"]) == {"fetch", "chunk", "index", "retrieval", "generation", "total"}
        assert response.context[0]["rank"] == 1

    def test_follow_up_is_rephrased(self, chain, mock_llm_service):
        """With history, the model is called twice: rewrite then answer."""
        mock_llm_service.chat.side_effect = [
            LLMResponse(content="How do I reset the admin password?", model="test-model"),
            LLMResponse(content="Run the reset command.", model="test-model"),
        ]
        history = [Message.user("Which databases are supported?"), Message.assistant("Several.")]

        response = chain.answer(history, "and the password?")

        assert response.answer == "Run the reset command."
        assert response.search_query == "How do I reset the admin password?"
        assert response.metadata["rephrased"] is True
        answer_messages = mock_llm_service.chat.call_args_list[1].args[0]
        assert answer_messages[1:3] == history
        assert answer_messages[-1] == Message.user("and the password?")

    def test_empty_corpus_still_answers(self, chain, source, embedding_service, mock_llm_service):
        """An unreachable source still produces an answer, from no context."""
        source.fetch.return_value = []
        mock_llm_service.chat.return_value = LLMResponse(
            content="I don't have that information.", model="test-model"
        )

        response = chain.answer([], "What is X?")

        assert response.answer == "I don't have that information."
        assert response.context == []
        assert response.metadata["chunks_indexed"] == 0
        assert embedding_service.document_calls == 0

    def test_nothing_is_reused_between_requests(self, chain, source, embedding_service):
        """Each request fetches and indexes from scratch."""
        chain.answer([], "first")
        source.fetch.return_value = [FAQEntry("What is X?", "X is Y.")]
        response = chain.answer([], "What is X?")

        assert source.fetch.call_count == 2
        assert embedding_service.document_calls == 2
        assert response.metadata["faq_entries"] == 1

    def test_embedding_error_propagates(self, chain):
        """Embedding failures reach the caller."""
        chain.index_builder = Mock()
        chain.index_builder.build.side_effect = EmbeddingServiceError("quota exceeded")

        with pytest.raises(EmbeddingServiceError):
            chain.answer([], "What is X?")

    def test_completion_error_propagates(self, chain, mock_llm_service):
        """Answer generation failures reach the caller."""
        mock_llm_service.chat.side_effect = CompletionServiceError("model down")

        with pytest.raises(CompletionServiceError):
            chain.answer([], "What is X?")


class TestCreateRagChain:
    """Tests for the factory."""

    def test_wires_settings(self, embedding_service, mock_llm_service):
        """Settings flow into each stage."""
        settings = Settings()
        settings.retrieval.top_k = 3
        settings.assistant.domain = "Acme"
        settings.chunking.chunk_size = 80

        chain = create_rag_chain(
            settings,
            llm_service=mock_llm_service,
            embedding_service=embedding_service,
        )

        assert chain.retriever.top_k == 3
        assert chain.composer.domain == "Acme"
        assert chain.chunker.chunk_size == 80
        assert chain.source.config is settings.source
