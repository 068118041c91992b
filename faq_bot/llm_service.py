"""
LLM Service Module

Provides an abstraction layer for chat-style Large Language Model providers:
- Cloud: OpenAI (GPT-3.5/4) - Requires API key (default)
- Local: Ollama (Llama, Mistral, etc.) - Free, runs locally
- Cloud: Google Gemini - Requires API key
- Cloud: Mistral AI - Requires API key

Every provider takes the same input: an ordered list of system/user/assistant
messages. LLMService wraps provider failures in CompletionServiceError.

Usage:
    llm = LLMService(config=settings.llm)
    response = llm.chat([
        Message.system("You are a helpful assistant."),
        Message.user("What is Strapi?"),
    ])
    print(response.content)
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from google import genai
from google.genai import types

from config.settings import LLMConfig
from faq_bot.exceptions import CompletionServiceError
from faq_bot.memory import SYSTEM, Message, to_llm_messages

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """
    Standardized response from LLM providers.

    Attributes:
        content: The generated text response
        model: Model name used for generation
        usage: Token usage statistics (if available)
        finish_reason: Why generation stopped
    """
    content: str
    model: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None

    def __str__(self) -> str:
        return self.content


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All providers must implement chat(): generate the next assistant turn
    for an ordered list of messages.
    """

    @abstractmethod
    def chat(
        self,
        messages: Sequence[Message],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: System/user/assistant messages, oldest first
            temperature: Creativity (0-1, lower = more deterministic)
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse object
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model name."""
        pass


class OllamaProvider(BaseLLMProvider):
    """
    Ollama provider for local LLM inference.

    Requirements:
    - Ollama installed: https://ollama.ai
    - Model pulled: ollama pull llama3.2
    """

    def __init__(
        self,
        model: str = "llama3.2",
        base_url: str = "http://localhost:11434",
        timeout: float = 60.0,
    ):
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = None
        self._lock = threading.Lock()

        logger.info(f"Initializing OllamaProvider: model={model}, url={base_url}")

    def _get_client(self):
        """Get or create Ollama client."""
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is None:
                import ollama
                self._client = ollama.Client(host=self._base_url, timeout=self._timeout)
                logger.info("Ollama client initialized")
        return self._client

    def chat(
        self,
        messages: Sequence[Message],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        options = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens

        response = client.chat(
            model=self._model,
            messages=to_llm_messages(messages),
            options=options,
        )

        return LLMResponse(
            content=response["message"]["content"] or "",
            model=self._model,
            usage={
                "prompt_tokens": response.get("prompt_eval_count") or 0,
                "completion_tokens": response.get("eval_count") or 0,
            },
            finish_reason="stop",
        )

    @property
    def model_name(self) -> str:
        return self._model


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI provider for GPT models.

    Models:
    - gpt-3.5-turbo: Fast, cost-effective (default)
    - gpt-4o-mini: Cheap and capable
    - gpt-4o: Most capable
    """

    def __init__(
        self,
        model: str = "gpt-3.5-turbo",
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._client = None
        self._lock = threading.Lock()

        logger.info(f"Initializing OpenAIProvider: model={model}")

    def _get_client(self):
        """Get or create OpenAI client."""
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
                logger.info("OpenAI client initialized")
        return self._client

    def chat(
        self,
        messages: Sequence[Message],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        kwargs = {
            "model": self._model,
            "messages": to_llm_messages(messages),
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        response = client.chat.completions.create(**kwargs)

        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    @property
    def model_name(self) -> str:
        return self._model


class GeminiProvider(BaseLLMProvider):
    """
    Google Gemini provider using the google-genai package.

    System messages become the system instruction; assistant turns are sent
    with Gemini's "model" role.
    """

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._client = None
        self._lock = threading.Lock()

        logger.info(f"Initializing GeminiProvider: model={model}")

    def _get_client(self):
        """Get or create Gemini client."""
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is None:
                api_key = self._api_key or os.getenv("GEMINI_API_KEY")
                if not api_key:
                    raise ValueError(
                        "Gemini API key not found. Set GEMINI_API_KEY environment variable."
                    )

                self._client = genai.Client(
                    api_key=api_key,
                    http_options=types.HttpOptions(timeout=int(self._timeout * 1000)),
                )
                logger.info(f"Gemini client initialized with model: {self._model}")
        return self._client

    @staticmethod
    def _to_contents(messages: Sequence[Message]):
        """Split messages into (system instruction, conversation contents)."""
        system_parts = [m.content for m in messages if m.role == SYSTEM]
        contents = [
            types.Content(
                role="user" if m.role == "user" else "model",
                parts=[types.Part(text=m.content)],
            )
            for m in messages
            if m.role != SYSTEM
        ]
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def chat(
        self,
        messages: Sequence[Message],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()
        system_instruction, contents = self._to_contents(messages)

        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
        )
        if max_tokens:
            config.max_output_tokens = max_tokens

        response = client.models.generate_content(
            model=self._model,
            contents=contents,
            config=config,
        )

        return LLMResponse(
            content=response.text or "",
            model=self._model,
            finish_reason="stop",
        )

    @property
    def model_name(self) -> str:
        return self._model


class MistralProvider(BaseLLMProvider):
    """
    Mistral AI cloud provider.

    Models:
    - mistral-small-latest: Fast, efficient (recommended for FAQ)
    - mistral-medium-latest: Balanced
    - mistral-large-latest: Most capable
    """

    def __init__(
        self,
        model: str = "mistral-small-latest",
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._client = None
        self._lock = threading.Lock()

        logger.info(f"Initializing MistralProvider: model={model}")

    def _get_client(self):
        """Get or create Mistral client."""
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is None:
                from mistralai import Mistral

                api_key = self._api_key or os.getenv("MISTRAL_API_KEY")
                if not api_key:
                    raise ValueError(
                        "Mistral API key not found. Set MISTRAL_API_KEY environment variable."
                    )

                self._client = Mistral(api_key=api_key, timeout_ms=int(self._timeout * 1000))
                logger.info(f"Mistral client initialized with model: {self._model}")
        return self._client

    def chat(
        self,
        messages: Sequence[Message],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        response = client.chat.complete(
            model=self._model,
            messages=to_llm_messages(messages),
            temperature=temperature,
            max_tokens=max_tokens,
        )

        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            model=self._model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    @property
    def model_name(self) -> str:
        return self._model


class LLMService:
    """
    Main LLM Service with unified interface.

    This is the class that other components should use.
    It handles provider selection based on configuration.

    Example:
        llm = LLMService(config=settings.llm)
        response = llm.chat([Message.user("What is Strapi?")])

        # Specify provider
        llm = LLMService(provider="ollama")
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[LLMConfig] = None,
    ):
        """
        Initialize the LLM service.

        Args:
            provider: "openai", "ollama", "gemini", or "mistral" (default from config)
            config: Optional LLMConfig instance
        """
        self.config = config or LLMConfig()
        provider = provider or self.config.provider

        if provider == "ollama":
            self._provider = OllamaProvider(
                model=self.config.ollama_model,
                base_url=self.config.ollama_base_url,
                timeout=self.config.timeout,
            )
        elif provider == "openai":
            self._provider = OpenAIProvider(
                model=self.config.openai_model,
                api_key=self.config.openai_api_key,
                timeout=self.config.timeout,
            )
        elif provider == "gemini":
            self._provider = GeminiProvider(
                model=self.config.gemini_model,
                api_key=self.config.gemini_api_key,
                timeout=self.config.timeout,
            )
        elif provider == "mistral":
            self._provider = MistralProvider(
                model=self.config.mistral_model,
                api_key=self.config.mistral_api_key,
                timeout=self.config.timeout,
            )
        else:
            raise ValueError(f"Unknown LLM provider: {provider}")

        self._provider_name = provider
        logger.info(f"LLMService initialized with {provider} provider")

    def chat(
        self,
        messages: Sequence[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate the next assistant turn.

        Args:
            messages: System/user/assistant messages, oldest first
            temperature: Creativity (default from config)
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse object

        Raises:
            CompletionServiceError: If the provider call fails
        """
        if temperature is None:
            temperature = self.config.temperature

        try:
            return self._provider.chat(
                messages=list(messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger.error(f"{self._provider_name} generation error: {e}")
            raise CompletionServiceError(f"Completion service failed: {e}") from e

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._provider.model_name

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return self._provider_name
