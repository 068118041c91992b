"""
Conversation Memory Module

Represents the dialogue turns a client sends with every chat request.

The server holds no session state: the chat widget keeps the conversation
and sends the whole history each time. This module only converts that
history into role-tagged messages the LLM providers understand.

Usage:
    history = messages_from_payload([
        {"role": "user", "content": "What is Strapi?"},
        {"role": "assistant", "content": "Strapi is a headless CMS."},
    ])
    llm_messages = to_llm_messages(history)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence

logger = logging.getLogger(__name__)

USER = "user"
ASSISTANT = "assistant"
SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """
    Represents a single message in the conversation.

    Attributes:
        role: "user" or "assistant" ("system" only for prompts we build)
        content: The message text
    """
    role: str
    content: str

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=ASSISTANT, content=content)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=SYSTEM, content=content)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the chat API message format."""
        return {"role": self.role, "content": self.content}

    def __str__(self) -> str:
        return f"{self.role}: {self.content}"


def messages_from_payload(entries: Iterable[Dict[str, Any]]) -> List[Message]:
    """
    Convert wire-format history entries into Messages.

    Anything that isn't a user turn is treated as an assistant turn.

    Args:
        entries: [{"role": "user" | "assistant", "content": "..."}, ...]

    Returns:
        List of Message objects in the same order
    """
    history = []
    for entry in entries:
        if entry["role"] == USER:
            history.append(Message.user(entry["content"]))
        else:
            history.append(Message.assistant(entry["content"]))
    return history


def to_llm_messages(messages: Sequence[Message]) -> List[Dict[str, str]]:
    """
    Get messages in LLM API format.

    Returns format compatible with OpenAI/Ollama/Mistral chat APIs:
    [{"role": "user", "content": "..."}, {"role": "assistant", "content": "..."}]
    """
    return [m.to_dict() for m in messages]
