"""
Chat HTTP API.

FastAPI application exposing the RAG pipeline to the browser chat widget.

Endpoints:
    POST /chat    {"chatHistory": [...], "input": "..."} → {"answer": "...", ...}
    GET  /health  → service status

Every failure is returned as JSON ({"error": "...", "code": "..."}); a
pipeline error never escapes the request.

Usage:
    uvicorn faq_bot.api:create_app --factory --port 30080
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import Settings
from faq_bot.exceptions import FAQBotError, MalformedRequest
from faq_bot.memory import messages_from_payload
from faq_bot.rag_chain import RAGChain, create_rag_chain
from faq_bot.schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)


def get_rag_chain(request: Request) -> RAGChain:
    return request.app.state.rag_chain


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Malformed request"


def create_app(
    settings: Optional[Settings] = None,
    rag_chain: Optional[RAGChain] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (read from the environment if omitted)
        rag_chain: Pre-built pipeline (built from settings if omitted)

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="FAQ Chatbot",
        description="Retrieval-augmented FAQ assistant.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.rag_chain = rag_chain or create_rag_chain(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = MalformedRequest(_describe_validation_error(exc))
        logger.warning(f"Rejected malformed request to {request.url.path}: {error.message}")
        return JSONResponse(
            status_code=error.status_code,
            content={"error": error.message, "code": error.error_code},
        )

    @app.exception_handler(FAQBotError)
    async def faq_bot_error_handler(request: Request, exc: FAQBotError):
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "code": exc.error_code},
        )

    @app.post(
        "/chat",
        response_model=ChatResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed request"},
            500: {"model": ErrorResponse, "description": "Unexpected server error"},
            502: {"model": ErrorResponse, "description": "Embedding or model service failed"},
        },
    )
    def chat(body: ChatRequest, chain: RAGChain = Depends(get_rag_chain)):
        """
        Answer the latest input given the full conversation so far.

        Runs in FastAPI's thread pool; each request builds its own index.
        """
        history = messages_from_payload(m.model_dump() for m in body.chat_history)

        try:
            response = chain.answer(history, body.input)
        except FAQBotError:
            raise
        except Exception as e:
            logger.error(f"Chat pipeline error: {e}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
            )

        logger.info(f"Server response: answer={response.answer!r}")
        return response.to_dict()

    @app.get("/health", response_model=HealthResponse)
    def health(settings: Settings = Depends(get_settings)):
        """Report configured providers; does not call them."""
        return HealthResponse(
            status="ok",
            llm_provider=settings.llm.provider,
            embedding_provider=settings.embedding.provider,
            faq_source=settings.source.url,
        )

    return app
