"""Pydantic models shared by the proxy and the chat client.

Provides type safety and validation for both persisted state and the wire
contract of the chat endpoint.

Models:
    - Message: Individual message in a conversation
    - Session: Conversation thread with its ordered history
    - ChatRequest: Incoming chat request payload
    - PersistStatus: Result of a storage write
"""

from src.models.schemas import (
    DEFAULT_TITLE,
    ChatRequest,
    Message,
    PersistStatus,
    Reasoning,
    Session,
)

__all__ = [
    "DEFAULT_TITLE",
    "ChatRequest",
    "Message",
    "PersistStatus",
    "Reasoning",
    "Session",
]
