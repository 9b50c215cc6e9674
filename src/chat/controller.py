"""Conversation controller: one send/receive exchange at a time.

An exchange appends the user's message, locks the input, calls the chat API,
paints the reply as it arrives and appends it to the session it started in.
Only one exchange may be in flight per page at a time.
"""

import logging

from src.chat.client import ChatApiClient
from src.chat.presenter import ChatPresenter
from src.models.schemas import Message, Session

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Sorry, there was an error processing your request."


class SendGate:
    """Flag guarding the single in-flight exchange of a page."""

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def try_acquire(self) -> bool:
        """Take the gate if it is free. Never suspends, so it is atomic on the loop."""
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self) -> None:
        self._busy = False


class ConversationController:
    """Drives exchanges for the active session.

    Args:
        presenter: UI sync layer; also gives access to the session store.
        client: Chat API client.
        gate: Shared send gate. A fresh one is created if omitted.
    """

    def __init__(
        self,
        presenter: ChatPresenter,
        client: ChatApiClient,
        gate: SendGate | None = None,
    ) -> None:
        self._presenter = presenter
        self._store = presenter.store
        self._client = client
        self._gate = gate or SendGate()

    @property
    def sending(self) -> bool:
        return self._gate.busy

    async def send(self, text: str) -> bool:
        """Run one exchange for the active session.

        Args:
            text: Raw input; surrounding whitespace is stripped.

        Returns:
            False if the send was rejected (empty input or an exchange is
            already running), True once the exchange has finished.
        """
        message = text.strip()
        if not message or not self._gate.try_acquire():
            return False

        try:
            # The reply lands in this session even if the user switches away.
            session = self._store.current()
            user_message = Message(role="user", content=message)
            session.history.append(user_message)
            self._store.save(session)

            self._presenter.set_busy(True)
            self._presenter.show_message(session, user_message)
            self._presenter.show_thinking(session)

            partial_shown = False

            def on_partial(accumulated: str) -> None:
                nonlocal partial_shown
                if not partial_shown:
                    self._presenter.hide_thinking()
                    partial_shown = True
                self._presenter.show_partial(session, accumulated)

            try:
                reply = await self._client.send(list(session.history), on_partial)
            except Exception as e:
                logger.exception(f"Chat exchange failed for session {session.id}: {e}")
                content, paint = ERROR_MESSAGE, True
            else:
                content, paint = reply.text, not partial_shown

            self._presenter.hide_thinking()
            if partial_shown:
                self._presenter.end_partial(session)
            self._append_assistant(session, content, paint)
        finally:
            self._presenter.hide_thinking()
            self._gate.release()
            self._presenter.set_busy(False)
        return True

    def _append_assistant(self, session: Session, content: str, paint: bool) -> None:
        if self._store.get(session.id) is None:
            logger.info(f"Dropping reply for deleted session {session.id}")
            return
        assistant_message = Message(role="assistant", content=content)
        session.history.append(assistant_message)
        self._store.save(session)
        if paint:
            self._presenter.show_message(session, assistant_message)
        else:
            self._presenter.render_sessions()
