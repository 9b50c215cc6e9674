from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "New Chat"


class PersistStatus(str, Enum):
    """Outcome of writing the session registry to storage."""

    OK = "ok"
    QUOTA_EXCEEDED = "quota_exceeded"
    FAILED = "failed"


class Message(BaseModel):
    """A single chat message in a conversation.

    Attributes:
        role: The speaker, either user or assistant.
        content: The message text.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class Session(BaseModel):
    """One conversation thread.

    Attributes:
        id: Opaque unique identifier.
        title: Display title shown in the session list.
        history: Messages in conversation order.
    """

    id: str
    title: str = DEFAULT_TITLE
    history: list[Message] = Field(default_factory=list)


class Reasoning(BaseModel):
    """Optional reasoning controls forwarded to the model."""

    effort: Literal["low", "medium", "high"] | None = None
    summary: Literal["auto", "concise", "detailed"] | None = None


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        input: Flattened transcript, or a list of structured input items.
        reasoning: Optional reasoning controls.
    """

    input: str | list[Any]
    reasoning: Reasoning | None = None

    @field_validator("input")
    @classmethod
    def require_input(cls, v: str | list[Any]) -> str | list[Any]:
        """Reject empty input."""
        if not v:
            raise ValueError('Missing required "input" field.')
        return v
