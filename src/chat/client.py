"""HTTP client for the chat endpoint.

Sends the flattened transcript to POST /api/chat and turns either response
shape into the assistant's text:

- text/event-stream: chunks are split into lines; a JSON line contributes its
  `response` field, any other line is taken verbatim.
- application/json: the first assistant message's first output_text part.
"""

import json
import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from src.chat.config import ClientConfig
from src.models.schemas import ChatRequest, Message, Reasoning

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"
EVENT_STREAM = "text/event-stream"

NO_TEXT_FOUND = "[No response text found]"
NO_ASSISTANT_MESSAGE = "[No assistant message found]"


class ChatRequestError(Exception):
    """Raised when an exchange fails: transport error, non-2xx, or bad body."""

    pass


@dataclass(frozen=True)
class ChatReply:
    """Resolved assistant text and whether it arrived as a stream."""

    text: str
    streamed: bool


def build_transcript(history: list[Message]) -> str:
    """Flatten a history into one newline-joined string of message contents."""
    return "\n".join(message.content for message in history)


def _line_text(line: str) -> str:
    try:
        data = json.loads(line)
    except ValueError:
        return line
    if isinstance(data, dict) and isinstance(data.get("response"), str):
        return data["response"]
    return ""


async def consume_stream(
    chunks: AsyncIterable[str],
    on_partial: Callable[[str], None] | None = None,
) -> str:
    """Accumulate streamed text chunk by chunk.

    Args:
        chunks: Decoded body chunks in arrival order.
        on_partial: Called with the accumulated text after every line.

    Returns:
        The full accumulated text.
    """
    accumulated = ""
    async for chunk in chunks:
        for line in chunk.split("\n"):
            if not line.strip():
                continue
            accumulated += _line_text(line)
            if on_partial is not None:
                on_partial(accumulated)
    return accumulated


def extract_output_text(data: Any) -> str:
    """Pick the assistant text out of a non-streaming response document."""
    output = data.get("output") if isinstance(data, dict) else None
    if not isinstance(output, list):
        return NO_ASSISTANT_MESSAGE

    message = next(
        (
            item
            for item in output
            if isinstance(item, dict)
            and item.get("type") == "message"
            and item.get("role") == "assistant"
        ),
        None,
    )
    if message is None or not isinstance(message.get("content"), list):
        return NO_ASSISTANT_MESSAGE

    part = next(
        (
            c
            for c in message["content"]
            if isinstance(c, dict)
            and c.get("type") == "output_text"
            and isinstance(c.get("text"), str)
        ),
        None,
    )
    return part["text"] if part is not None else NO_TEXT_FOUND


class ChatApiClient:
    """Client for the chat endpoint.

    Requests have no timeout: an exchange is awaited until the server finishes.

    Args:
        config: Client configuration (base URL, reasoning options).
        transport: Optional httpx transport, used in tests.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def build_request(self, history: list[Message]) -> ChatRequest:
        reasoning: Reasoning | None = self._config.reasoning
        return ChatRequest(input=build_transcript(history), reasoning=reasoning)

    async def send(
        self,
        history: list[Message],
        on_partial: Callable[[str], None] | None = None,
    ) -> ChatReply:
        """Run one exchange for the given history.

        Args:
            history: Conversation so far, including the new user message.
            on_partial: Receives the accumulated text while streaming.

        Returns:
            The resolved reply.

        Raises:
            ChatRequestError: On transport failure, non-2xx status, or an
                undecodable JSON body.
        """
        body = self.build_request(history).model_dump(exclude_none=True)
        try:
            async with (
                httpx.AsyncClient(
                    base_url=self._config.api_base_url,
                    transport=self._transport,
                    timeout=None,
                ) as client,
                client.stream("POST", CHAT_PATH, json=body) as response,
            ):
                response.raise_for_status()
                content_type = response.headers.get("content-type", "")
                if EVENT_STREAM in content_type:
                    text = await consume_stream(response.aiter_text(), on_partial)
                    return ChatReply(text=text, streamed=True)

                await response.aread()
                return ChatReply(text=extract_output_text(response.json()), streamed=False)
        except httpx.HTTPError as e:
            raise ChatRequestError(f"Chat request failed: {e}") from e
        except ValueError as e:
            raise ChatRequestError(f"Invalid chat response body: {e}") from e
