"""
Shared fixtures for the FAQ chatbot tests.

No test talks to a real model or HTTP server: embeddings come from a
deterministic word-hashing fake and LLM calls are mocked.
"""

import re
import zlib
from typing import List
from unittest.mock import Mock

import pytest

from faq_bot.faq_source import FAQEntry
from faq_bot.llm_service import LLMResponse


class HashingEmbeddingService:
    """
    Deterministic stand-in for EmbeddingService.

    Each word is hashed into one of `dimension` buckets, so texts sharing
    words get similar vectors.
    """

    provider_name = "fake"
    model_name = "hashing-64"

    def __init__(self, dimension: int = 64):
        self.dimension = dimension
        self.document_calls = 0
        self.query_calls = 0

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode()) % self.dimension] += 1.0
        return vector

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.document_calls += 1
        return [self._vector(t) for t in texts]

    def embed_query(self, query: str) -> List[float]:
        self.query_calls += 1
        return self._vector(query)


@pytest.fixture
def embedding_service():
    """Deterministic fake embedding service."""
    return HashingEmbeddingService()


@pytest.fixture
def faq_entries():
    """A small FAQ corpus."""
    return [
        FAQEntry(
            question="How do I create a content type?",
            answer="Open the Content-Type Builder in the admin panel and click Create new collection type.",
        ),
        FAQEntry(
            question="Which databases are supported?",
            answer="SQLite, PostgreSQL, MySQL and MariaDB are supported.",
        ),
        FAQEntry(
            question="How do I reset the admin password?",
            answer="Run the admin:reset-user-password command from the project folder.",
        ),
    ]


@pytest.fixture
def mock_llm_service():
    """LLM service mock returning a fixed answer."""
    llm = Mock()
    llm.chat.return_value = LLMResponse(content="Generated response", model="test-model")
    llm.provider_name = "mock"
    llm.model_name = "test-model"
    return llm


def _strapi_payload(entries, page=1, page_count=1):
    """Build a Strapi-style /api/faqs page from (question, answer) pairs."""
    return {
        "data": [
            {
                "id": i + 1,
                "attributes": {
                    "Question": question,
                    "Answer": [
                        {"type": "paragraph", "children": [{"type": "text", "text": answer}]}
                    ],
                },
            }
            for i, (question, answer) in enumerate(entries)
        ],
        "meta": {
            "pagination": {
                "page": page,
                "pageSize": 25,
                "pageCount": page_count,
                "total": len(entries),
            }
        },
    }


@pytest.fixture
def strapi_payload():
    """Factory for Strapi-style FAQ pages."""
    return _strapi_payload
