"""Chat client configuration with environment variable loading."""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.chat.storage import DEFAULT_QUOTA_BYTES
from src.models.schemas import Reasoning

load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the browser-side chat client.

    Attributes:
        api_base_url: Base URL of the API serving POST /api/chat.
        reasoning_effort: Optional reasoning effort sent with every request.
        reasoning_summary: Optional reasoning summary mode.
        storage_quota_bytes: Capacity of the per-browser session storage.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        description="Base URL of the chat API",
    )
    reasoning_effort: Literal["low", "medium", "high"] | None = Field(
        default_factory=lambda: os.getenv("CHAT_REASONING_EFFORT") or None,
    )
    reasoning_summary: Literal["auto", "concise", "detailed"] | None = Field(
        default_factory=lambda: os.getenv("CHAT_REASONING_SUMMARY") or None,
    )
    storage_quota_bytes: int = Field(
        default_factory=lambda: int(os.getenv("CHAT_STORAGE_QUOTA", str(DEFAULT_QUOTA_BYTES))),
        ge=1024,
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def reasoning(self) -> Reasoning | None:
        """Reasoning controls for the request body, if any are configured."""
        if self.reasoning_effort is None and self.reasoning_summary is None:
            return None
        return Reasoning(effort=self.reasoning_effort, summary=self.reasoning_summary)


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
