"""
Error taxonomy for the FAQ chatbot.

Every error carries the HTTP status and a short machine-readable code so the
chat endpoint can translate it into a JSON error body in one place.
"""


class FAQBotError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceUnavailable(FAQBotError):
    """The FAQ content API could not be read (network, status or payload)."""

    status_code = 503
    error_code = "SOURCE_UNAVAILABLE"


class EmbeddingServiceError(FAQBotError):
    """The embedding provider failed."""

    status_code = 502
    error_code = "EMBEDDING_SERVICE_ERROR"


class CompletionServiceError(FAQBotError):
    """The language model provider failed."""

    status_code = 502
    error_code = "COMPLETION_SERVICE_ERROR"


class MalformedRequest(FAQBotError):
    """The chat request body is missing fields or has the wrong shape."""

    status_code = 400
    error_code = "MALFORMED_REQUEST"
