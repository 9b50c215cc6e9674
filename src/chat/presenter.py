"""Keeps the message list and the session list in step with the store.

The presenter owns every paint decision; the concrete view (NiceGUI in the
app, a recorder in tests) only knows how to draw what it is handed.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from src.chat.rendering import message_to_html, session_preview
from src.chat.session_store import SessionStore
from src.models.schemas import Message, Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionListItem:
    """One row of the sidebar session list."""

    id: str
    title: str
    preview: str
    active: bool


class ChatView(Protocol):
    """Drawing surface for a chat page."""

    def clear_messages(self) -> None: ...

    def append_message(self, role: str, html: str) -> None: ...

    def show_thinking(self) -> None: ...

    def hide_thinking(self) -> None: ...

    def show_partial(self, text: str) -> None: ...

    def end_partial(self) -> None: ...

    def render_sessions(self, items: list[SessionListItem]) -> None: ...

    def set_input_enabled(self, enabled: bool) -> None: ...

    def focus_input(self) -> None: ...


class ChatPresenter:
    """Projects store state onto a ChatView.

    Args:
        store: Session registry to read from and persist to.
        view: Surface to paint on.
    """

    def __init__(self, store: SessionStore, view: ChatView) -> None:
        self._store = store
        self._view = view

    @property
    def store(self) -> SessionStore:
        return self._store

    def is_active(self, session: Session) -> bool:
        return self._store.active_id == session.id

    def start(self) -> None:
        """Select a session (creating one if the registry is empty) and paint."""
        self._store.current()
        self.render_messages()
        self.render_sessions()

    def session_items(self) -> list[SessionListItem]:
        active_id = self._store.active_id
        return [
            SessionListItem(
                id=s.id,
                title=s.title,
                preview=session_preview(s),
                active=s.id == active_id,
            )
            for s in self._store.sessions
        ]

    def render_sessions(self) -> None:
        self._view.render_sessions(self.session_items())

    def render_messages(self) -> None:
        """Clear and rebuild the message list from the active session."""
        self._view.clear_messages()
        for message in self._store.current().history:
            self._view.append_message(message.role, message_to_html(message))

    def show_message(self, session: Session, message: Message) -> None:
        """Append one message to the list if its session is on screen."""
        if self.is_active(session):
            self._view.append_message(message.role, message_to_html(message))
        self.render_sessions()

    def show_partial(self, session: Session, text: str) -> None:
        if self.is_active(session):
            self._view.show_partial(text)

    def end_partial(self, session: Session) -> None:
        if self.is_active(session):
            self._view.end_partial()

    def show_thinking(self, session: Session) -> None:
        if self.is_active(session):
            self._view.show_thinking()

    def hide_thinking(self) -> None:
        self._view.hide_thinking()

    def set_busy(self, busy: bool) -> None:
        self._view.set_input_enabled(not busy)
        if not busy:
            self._view.focus_input()

    def switch_chat(self, session_id: str) -> bool:
        """Show another session, persisting the current one first.

        Returns:
            False if the id is unknown, True otherwise.
        """
        if session_id == self._store.active_id:
            return True
        if self._store.get(session_id) is None:
            return False
        if self._store.active_id is not None:
            active = self._store.get(self._store.active_id)
            if active is not None:
                self._store.save(active)
        self._store.set_active(session_id)
        self.render_messages()
        self.render_sessions()
        return True

    def new_chat(self) -> str:
        session_id = self._store.create()
        self.render_messages()
        self.render_sessions()
        return session_id

    def delete_chat(self, session_id: str) -> bool:
        """Delete a session and reselect if it was the one on screen."""
        was_active = session_id == self._store.active_id
        if not self._store.delete(session_id):
            return False
        self._store.current()
        if was_active:
            self.render_messages()
        self.render_sessions()
        return True
