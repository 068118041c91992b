"""
Embedding Service Module

Provides an abstraction layer for embedding generation, supporting both:
- Cloud: OpenAI (text-embedding-3-small) - Requires API key (default)
- Local: Sentence Transformers (all-MiniLM-L6-v2) - Free, no API key needed

Every provider failure surfaces as EmbeddingServiceError so the chat
endpoint can report an upstream-dependency failure instead of crashing.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from config.settings import EmbeddingConfig
from faq_bot.exceptions import EmbeddingServiceError

# Configure logging
logger = logging.getLogger(__name__)


class BaseEmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    All embedding providers must implement:
    - embed_text: Embed a single text string
    - embed_batch: Embed multiple texts efficiently
    """

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for a single text."""
        pass

    @abstractmethod
    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts, in input order."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the name of the embedding model."""
        pass


class LocalEmbeddingProvider(BaseEmbeddingProvider):
    """
    Local embedding provider using Sentence Transformers.

    Models:
    - all-MiniLM-L6-v2: Fast, 384 dims (default)
    - all-mpnet-base-v2: Better quality, 768 dims
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self._model_name = model_name
        self._model = None
        self._lock = threading.Lock()

        logger.info(f"Initializing LocalEmbeddingProvider with model: {model_name}")

    def _load_model(self):
        """Lazy load the model (only when first needed, once across threads)."""
        if self._model is not None:
            return

        with self._lock:
            if self._model is None:
                from sentence_transformers import SentenceTransformer

                if hf_token := os.getenv("HF_TOKEN"):
                    from huggingface_hub import login
                    login(token=hf_token)

                logger.info(f"Loading sentence-transformers model: {self._model_name}")
                self._model = SentenceTransformer(self._model_name)
                logger.info(
                    f"Model loaded. Embedding dimension: "
                    f"{self._model.get_sentence_embedding_dimension()}"
                )

    def embed_text(self, text: str) -> List[float]:
        self._load_model()
        embedding = self._model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        self._load_model()

        if not texts:
            return []

        logger.debug(f"Embedding batch of {len(texts)} texts")

        embeddings = self._model.encode(
            texts,
            convert_to_numpy=True,
            show_progress_bar=False,
            batch_size=32,
        )
        return embeddings.tolist()

    @property
    def model_name(self) -> str:
        return self._model_name


class OpenAIEmbeddingProvider(BaseEmbeddingProvider):
    """
    OpenAI embedding provider using the embeddings API.

    Models:
    - text-embedding-3-small: 1536 dims (cheaper)
    - text-embedding-3-large: 3072 dims (better quality)
    - text-embedding-ada-002: 1536 dims (legacy)
    """

    # OpenAI accepts up to 2048 inputs per request; stay well below
    BATCH_SIZE = 100

    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._model_name = model_name
        self._api_key = api_key
        self._timeout = timeout
        self._client = None
        self._lock = threading.Lock()

        logger.info(f"Initializing OpenAIEmbeddingProvider with model: {model_name}")

    def _get_client(self):
        """Get or create the OpenAI client."""
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is None:
                from openai import OpenAI

                api_key = self._api_key or os.getenv("OPENAI_API_KEY")
                if not api_key:
                    raise ValueError(
                        "OpenAI API key not found. Set OPENAI_API_KEY environment variable."
                    )

                self._client = OpenAI(api_key=api_key, timeout=self._timeout)
                logger.info("OpenAI embeddings client initialized")

        return self._client

    def embed_text(self, text: str) -> List[float]:
        client = self._get_client()
        response = client.embeddings.create(input=text, model=self._model_name)
        return response.data[0].embedding

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        client = self._get_client()
        logger.debug(f"Embedding batch of {len(texts)} texts via OpenAI")

        all_embeddings = []
        for i in range(0, len(texts), self.BATCH_SIZE):
            batch = texts[i:i + self.BATCH_SIZE]
            response = client.embeddings.create(input=batch, model=self._model_name)

            # Sort by index to maintain order
            sorted_data = sorted(response.data, key=lambda x: x.index)
            all_embeddings.extend(item.embedding for item in sorted_data)

        return all_embeddings

    @property
    def model_name(self) -> str:
        return self._model_name


class EmbeddingService:
    """
    Main embedding service that provides a unified interface.

    This is the class that other components should use.

    Example:
        service = EmbeddingService(config=settings.embedding)
        vectors = service.embed_documents(["text1", "text2"])
        query_vector = service.embed_query("How do I deploy?")
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[EmbeddingConfig] = None,
    ):
        """
        Initialize the embedding service.

        Args:
            provider: "openai" or "local" (default from config)
            config: Optional EmbeddingConfig instance
        """
        self.config = config or EmbeddingConfig()
        provider = provider or self.config.provider

        if provider == "local":
            self._provider = LocalEmbeddingProvider(model_name=self.config.local_model)
        elif provider == "openai":
            self._provider = OpenAIEmbeddingProvider(
                model_name=self.config.openai_model,
                api_key=self.config.openai_api_key,
                timeout=self.config.timeout,
            )
        else:
            raise ValueError(f"Unknown embedding provider: {provider}")

        self._provider_name = provider
        logger.info(f"EmbeddingService initialized with {provider} provider")

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Embed many texts in one batched call.

        Returns exactly one vector per input text, in order.

        Raises:
            EmbeddingServiceError: If the provider fails or returns a
                mismatched number of vectors
        """
        if not texts:
            return []

        try:
            vectors = self._provider.embed_batch(list(texts))
        except Exception as e:
            logger.error(f"Embedding batch failed ({self.model_name}): {e}")
            raise EmbeddingServiceError(f"Embedding service failed: {e}") from e

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                f"Embedding service returned {len(vectors)} vectors for {len(texts)} texts"
            )
        return vectors

    def embed_query(self, query: str) -> List[float]:
        """
        Embed a search query.

        Raises:
            ValueError: If the query is empty
            EmbeddingServiceError: If the provider fails
        """
        if not query or not query.strip():
            raise ValueError("Cannot embed empty text")

        try:
            return self._provider.embed_text(query)
        except Exception as e:
            logger.error(f"Query embedding failed ({self.model_name}): {e}")
            raise EmbeddingServiceError(f"Embedding service failed: {e}") from e

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._provider.model_name

    @property
    def provider_name(self) -> str:
        """Return the provider name (local/openai)."""
        return self._provider_name
