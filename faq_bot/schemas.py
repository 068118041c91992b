"""Request/response models for the chat HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class HistoryMessage(BaseModel):
    """One conversation turn as sent by the chat widget."""

    role: StrictStr = Field(..., description="'user' or 'assistant'")
    content: StrictStr


class ChatRequest(BaseModel):
    """Body of POST /chat."""

    model_config = ConfigDict(populate_by_name=True)

    chat_history: List[HistoryMessage] = Field(default_factory=list, alias="chatHistory")
    input: StrictStr


class ContextChunk(BaseModel):
    """A retrieved chunk returned for diagnostics."""

    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: float
    rank: int


class ChatResponse(BaseModel):
    """Body of a successful POST /chat."""

    answer: str
    input: Optional[str] = None
    search_query: Optional[str] = None
    context: List[ContextChunk] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
    code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    llm_provider: str
    embedding_provider: str
    faq_source: str
