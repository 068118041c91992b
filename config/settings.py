"""
Configuration settings for the FAQ Chatbot.

This module handles all configuration management using environment variables.
No hardcoded endpoints - everything is configurable via .env file.

Settings are built once at startup with Settings.from_env() and passed
explicitly to the components that need them.
"""

import os
from dataclasses import dataclass, field
from typing import List, Literal, Optional
from dotenv import load_dotenv


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 30080
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class SourceConfig:
    """Configuration for the FAQ content API (Strapi)."""

    base_url: str = "http://localhost:1337"
    path: str = "/api/faqs"
    timeout: float = 10.0  # Seconds per HTTP call
    page_size: int = 100
    max_pages: int = 50
    api_token: Optional[str] = None

    @property
    def url(self) -> str:
        """Full URL of the FAQ collection endpoint."""
        return self.base_url.rstrip("/") + "/" + self.path.lstrip("/")


@dataclass
class EmbeddingConfig:
    """Configuration for embedding models."""

    provider: Literal["local", "openai"] = "openai"
    local_model: str = "all-MiniLM-L6-v2"
    openai_model: str = "text-embedding-3-small"
    openai_api_key: Optional[str] = None
    timeout: float = 30.0


@dataclass
class LLMConfig:
    """Configuration for LLM providers."""

    provider: Literal["ollama", "openai", "gemini", "mistral"] = "openai"
    temperature: float = 0.7
    timeout: float = 60.0

    # Ollama settings
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    # OpenAI settings
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"

    # Gemini settings
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"

    # Mistral settings
    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-small-latest"


@dataclass
class ChunkingConfig:
    """Configuration for FAQ chunking."""

    chunk_size: int = 100  # Characters per chunk
    chunk_overlap: int = 20  # Characters shared by neighbouring chunks


@dataclass
class RetrievalConfig:
    """Configuration for retrieval settings."""

    top_k: int = 4  # Number of chunks to retrieve


@dataclass
class AssistantConfig:
    """Configuration for the assistant persona."""

    domain: str = "Strapi"  # Subject the bot is allowed to talk about


@dataclass
class Settings:
    """
    Main settings class that aggregates all configurations.

    Usage:
        settings = Settings.from_env()
        print(settings.server.port)
        print(settings.llm.openai_model)
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Create Settings instance from environment variables.

        This is the primary way to instantiate Settings.

        Args:
            dotenv: Load a .env file into the environment first
        """
        if dotenv:
            load_dotenv()

        origins = os.getenv("CORS_ORIGINS", "*")
        server = ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 30080),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        )

        source = SourceConfig(
            base_url=os.getenv("FAQ_SOURCE_URL", "http://localhost:1337"),
            path=os.getenv("FAQ_SOURCE_PATH", "/api/faqs"),
            timeout=_env_float("FAQ_SOURCE_TIMEOUT", 10.0),
            page_size=_env_int("FAQ_SOURCE_PAGE_SIZE", 100),
            max_pages=_env_int("FAQ_SOURCE_MAX_PAGES", 50),
            api_token=os.getenv("FAQ_SOURCE_TOKEN"),
        )

        embedding = EmbeddingConfig(
            provider=os.getenv("EMBEDDING_PROVIDER", "openai"),  # type: ignore
            local_model=os.getenv("LOCAL_EMBEDDING_MODEL", "all-MiniLM-L6-v2"),
            openai_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            timeout=_env_float("EMBEDDING_TIMEOUT", 30.0),
        )

        llm = LLMConfig(
            provider=os.getenv("LLM_PROVIDER", "openai"),  # type: ignore
            temperature=_env_float("LLM_TEMPERATURE", 0.7),
            timeout=_env_float("LLM_TIMEOUT", 60.0),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            ollama_model=os.getenv("OLLAMA_MODEL", "llama3.2"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_LLM_MODEL", "gpt-3.5-turbo"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            mistral_api_key=os.getenv("MISTRAL_API_KEY"),
            mistral_model=os.getenv("MISTRAL_MODEL", "mistral-small-latest"),
        )

        chunking = ChunkingConfig(
            chunk_size=_env_int("CHUNK_SIZE", 100),
            chunk_overlap=_env_int("CHUNK_OVERLAP", 20),
        )

        retrieval = RetrievalConfig(
            top_k=_env_int("TOP_K_RESULTS", 4),
        )

        assistant = AssistantConfig(
            domain=os.getenv("ASSISTANT_DOMAIN", "Strapi"),
        )

        return cls(
            server=server,
            source=source,
            embedding=embedding,
            llm=llm,
            chunking=chunking,
            retrieval=retrieval,
            assistant=assistant,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
