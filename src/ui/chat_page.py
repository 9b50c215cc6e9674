"""NiceGUI chat interface with a session sidebar and streaming replies."""

import os
from collections.abc import Callable
from functools import partial

from nicegui import app, ui

from src.chat.client import ChatApiClient
from src.chat.config import get_client_config
from src.chat.controller import ConversationController
from src.chat.presenter import ChatPresenter, SessionListItem
from src.chat.session_store import SessionStore
from src.chat.storage import MappingStorage

THINKING_TEXT = "AI is thinking..."

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; }

    .sidebar { background: #1f2937; }
    .session-item { border-radius: 8px; cursor: pointer; transition: background 0.15s; }
    .session-item:hover { background: rgba(255, 255, 255, 0.08); }
    .session-item.active { background: rgba(255, 255, 255, 0.16); }

    .message-user {
        background: linear-gradient(135deg, #f6821f 0%, #e66c0c 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
    .input-box:focus-within { border-color: #f6821f; }

    .message-assistant strong { font-weight: 600; }
    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant a { color: #c2410c; }
</style>
"""


class NiceChatView:
    """ChatView drawn with NiceGUI elements.

    Holds references to the live thinking placeholder and streaming bubble so
    they can be replaced or removed; clearing the message list drops both.
    """

    def __init__(
        self,
        messages: ui.column,
        scroll: ui.scroll_area,
        sessions: ui.column,
        input_field: ui.textarea,
        send_btn: ui.button,
    ) -> None:
        self._messages = messages
        self._scroll = scroll
        self._sessions = sessions
        self._input = input_field
        self._send_btn = send_btn
        self._thinking: ui.element | None = None
        self._partial: ui.label | None = None
        self.on_select: Callable[[str], object] | None = None
        self.on_delete: Callable[[str], object] | None = None

    def _bubble(self, role: str) -> ui.element:
        is_user = role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"
        with self._messages, ui.row().classes(f"w-full {align}"):
            return ui.element("div").classes(f"max-w-[75%] px-4 py-3 {bubble}")

    def _scroll_to_bottom(self) -> None:
        self._scroll.scroll_to(percent=1.0)

    def clear_messages(self) -> None:
        self._messages.clear()
        self._thinking = None
        self._partial = None

    def append_message(self, role: str, html: str) -> None:
        with self._bubble(role):
            ui.html(html, sanitize=False).classes("text-sm leading-relaxed")
        self._scroll_to_bottom()

    def show_thinking(self) -> None:
        if self._thinking is not None:
            return
        with self._messages, ui.row().classes("w-full justify-start") as row:
            with ui.element("div").classes("message-assistant px-4 py-3"):
                ui.label(THINKING_TEXT).classes("text-sm text-gray-500 italic")
        self._thinking = row
        self._scroll_to_bottom()

    def hide_thinking(self) -> None:
        if self._thinking is not None:
            self._thinking.delete()
            self._thinking = None

    def show_partial(self, text: str) -> None:
        if self._partial is None:
            with self._bubble("assistant"):
                # Plain text while streaming; whitespace kept as typed.
                self._partial = ui.label().classes("text-sm leading-relaxed whitespace-pre-wrap")
        self._partial.set_text(text)
        self._scroll_to_bottom()

    def end_partial(self) -> None:
        self._partial = None

    def render_sessions(self, items: list[SessionListItem]) -> None:
        self._sessions.clear()
        with self._sessions:
            for item in items:
                active = " active" if item.active else ""
                with (
                    ui.row()
                    .classes(f"session-item{active} w-full px-3 py-2 items-center no-wrap")
                    .on("click", partial(self._select, item.id))
                ):
                    with ui.column().classes("gap-0 flex-grow min-w-0"):
                        ui.label(item.title).classes("text-sm text-white font-medium")
                        ui.label(item.preview).classes("text-xs text-gray-400 truncate w-full")
                    ui.button(icon="delete").props("flat round dense size=sm color=grey").on(
                        "click.stop", partial(self._delete, item.id)
                    )

    def _select(self, session_id: str) -> None:
        if self.on_select is not None:
            self.on_select(session_id)

    def _delete(self, session_id: str) -> None:
        if self.on_delete is not None:
            self.on_delete(session_id)

    def set_input_enabled(self, enabled: bool) -> None:
        for element in (self._input, self._send_btn):
            if enabled:
                element.enable()
            else:
                element.disable()

    def focus_input(self) -> None:
        self._input.run_method("focus")


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_client_config()

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or controller.sending:
            return
        input_field.value = ""
        await controller.send(text)

    # === UI Layout ===
    with ui.left_drawer(value=True).classes("sidebar p-3").props("width=280"):
        ui.button("New Chat", icon="add", on_click=lambda: presenter.new_chat()).props(
            "unelevated color=orange"
        ).classes("w-full mb-3")
        sessions_column = ui.column().classes("w-full gap-1")

    with ui.column().classes("w-full max-w-3xl mx-auto").style("height: calc(100vh - 2rem)"):
        with ui.row().classes("w-full px-2 py-3 items-center gap-3"):
            ui.icon("smart_toy").classes("text-orange-500 text-3xl")
            ui.label("LLM Chat").classes("text-lg font-semibold")

        with ui.scroll_area().classes("flex-grow w-full bg-white rounded-lg") as scroll:
            messages_column = ui.column().classes("w-full gap-4 p-4")

        with ui.row().classes("w-full py-3 gap-3 items-end"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Type your message here...")
                    .props("autogrow borderless dense rows=1")
                    .classes("w-full")
                    .on("keydown.enter.prevent", send_message)
                )
            send_btn = (
                ui.button(icon="send", on_click=send_message)
                .props("round unelevated color=orange")
            )

    view = NiceChatView(messages_column, scroll, sessions_column, input_field, send_btn)
    storage = MappingStorage(app.storage.user, quota_bytes=config.storage_quota_bytes)
    presenter = ChatPresenter(SessionStore(storage), view)
    controller = ConversationController(presenter, ChatApiClient(config))

    view.on_select = presenter.switch_chat
    view.on_delete = presenter.delete_chat
    presenter.start()


def main() -> None:
    ui.run(
        title="LLM Chat",
        port=int(os.getenv("UI_PORT", "8080")),
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "llm-chat-secret"),
    )


if __name__ == "__main__":
    main()
