"""Message-to-HTML rendering for the chat views.

Assistant messages go through a small markdown renderer; user messages are
shown as escaped text with their line breaks kept.
"""

import html
import re

from src.models.schemas import Message, Session

PREVIEW_LENGTH = 50
EMPTY_PREVIEW = "No messages yet"

_CODE_BLOCK_CLASSES = "bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs"
_INLINE_CODE_CLASSES = "bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs"

_INLINE_RULES: list[tuple[str, str]] = [
    (r"\*\*(.+?)\*\*", r"<strong>\1</strong>"),
    (r"__(.+?)__", r"<strong>\1</strong>"),
    (r"\*([^*\n]+)\*", r"<em>\1</em>"),
    (r"(?<!\w)_([^_\n]+)_(?!\w)", r"<em>\1</em>"),
    (
        r"\[([^\]]+)\]\(([^)\s]+)\)",
        r'<a href="\2" class="text-blue-600 underline" target="_blank">\1</a>',
    ),
]


def _wrap_list_items(text: str, marker: str, tag: str, classes: str) -> str:
    """Group consecutive lines starting with `marker` into one list element."""
    result: list[str] = []
    in_list = False
    for line in text.split("\n"):
        match = re.match(marker, line.strip())
        if match:
            if not in_list:
                result.append(f'<{tag} class="{classes}">')
                in_list = True
            result.append(f"<li>{line.strip()[match.end():]}</li>")
            continue
        if in_list:
            result.append(f"</{tag}>")
            in_list = False
        result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: bold, italic, inline code, code blocks, links, lists.
    """
    text = html.escape(text)

    # Code spans are pulled out first so inline rules never touch their body.
    blocks: list[str] = []

    def stash(markup: str) -> str:
        blocks.append(markup)
        return f"\x00{len(blocks) - 1}\x00"

    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        lambda m: stash(f'<pre class="{_CODE_BLOCK_CLASSES}"><code>{m.group(2)}</code></pre>'),
        text,
    )
    text = re.sub(
        r"`([^`\n]+)`",
        lambda m: stash(f'<code class="{_INLINE_CODE_CLASSES}">{m.group(1)}</code>'),
        text,
    )

    for pattern, replacement in _INLINE_RULES:
        text = re.sub(pattern, replacement, text)

    text = _wrap_list_items(text, r"^[-*]\s+", "ul", "list-disc list-inside my-2 space-y-1")
    text = _wrap_list_items(text, r"^\d+\.\s+", "ol", "list-decimal list-inside my-2 space-y-1")

    # List markup already separates items; only free text keeps its newlines.
    text = re.sub(r"\n?(</?(?:ul|ol|li)[^>]*>)\n?", r"\1", text)
    text = text.replace("\n", "<br>")

    return re.sub(r"\x00(\d+)\x00", lambda m: blocks[int(m.group(1))], text)


def user_text_to_html(text: str) -> str:
    return html.escape(text).replace("\n", "<br>")


def message_to_html(message: Message) -> str:
    """Render a stored message the way the message list shows it."""
    if message.role == "assistant":
        return markdown_to_html(message.content)
    return user_text_to_html(message.content)


def session_preview(session: Session) -> str:
    """First characters of the second history entry, or a placeholder."""
    if len(session.history) < 2:
        return EMPTY_PREVIEW
    return session.history[1].content[:PREVIEW_LENGTH]
