"""Session registry synchronized to a key-value store.

Owns creation, switching and deletion of chat sessions. The whole registry is
written under a single key as a JSON array on every mutation; reads are
defensive so a corrupted or outdated document degrades to fewer sessions
instead of an error.
"""

import json
import logging
import secrets
import time

from pydantic import TypeAdapter, ValidationError

from src.chat.storage import KeyValueStore, StorageQuotaError
from src.models.schemas import DEFAULT_TITLE, Message, PersistStatus, Session

logger = logging.getLogger(__name__)

STORAGE_KEY = "chat_sessions"

WELCOME_MESSAGE = Message(
    role="assistant",
    content=(
        "Hello! I'm OSS-120b, an AI model from OpenAI (similar to ChatGPT, "
        "but smaller, and open-source!) How can I help you today?"
    ),
)

_registry_adapter = TypeAdapter(list[Session])


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while number:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
    return out or "0"


def generate_session_id() -> str:
    """Millisecond timestamp plus a random suffix. Collisions are not checked."""
    return _base36(time.time_ns() // 1_000_000) + secrets.token_hex(4)


class SessionStore:
    """In-memory session registry with write-through persistence.

    Args:
        storage: Key-value store holding the serialized registry.
    """

    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage
        self._sessions: list[Session] = self.load_all()
        self._active_id: str | None = None
        self._active_history: list[Message] | None = None

    @property
    def sessions(self) -> list[Session]:
        return list(self._sessions)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active_history(self) -> list[Message] | None:
        """History list of the active session, shared by reference."""
        return self._active_history

    def get(self, session_id: str) -> Session | None:
        return next((s for s in self._sessions if s.id == session_id), None)

    def load_all(self) -> list[Session]:
        """Deserialize the persisted registry, dropping malformed entries."""
        raw = self._storage.get(STORAGE_KEY)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session registry")
            return []
        if not isinstance(entries, list):
            logger.warning(f"Discarding session registry of type {type(entries).__name__}")
            return []

        sessions: list[Session] = []
        seen: set[str] = set()
        for entry in entries:
            if not (
                isinstance(entry, dict)
                and isinstance(entry.get("id"), str)
                and isinstance(entry.get("title"), str)
                and isinstance(entry.get("history"), list)
            ):
                logger.debug(f"Dropping malformed session entry: {entry!r}")
                continue
            try:
                session = Session.model_validate(entry)
            except ValidationError as e:
                logger.debug(f"Dropping session {entry['id']}: {e}")
                continue
            if session.id in seen:
                continue
            seen.add(session.id)
            sessions.append(session)
        return sessions

    def _persist(self) -> PersistStatus:
        payload = _registry_adapter.dump_json(self._sessions).decode()
        try:
            self._storage.set(STORAGE_KEY, payload)
        except StorageQuotaError as e:
            logger.error(f"Session storage quota exceeded: {e}")
            return PersistStatus.QUOTA_EXCEEDED
        except Exception as e:
            logger.error(f"Failed to persist sessions: {e}")
            return PersistStatus.FAILED
        return PersistStatus.OK

    def save(self, session: Session) -> PersistStatus:
        """Upsert a session by id and persist the whole registry."""
        for index, existing in enumerate(self._sessions):
            if existing.id == session.id:
                self._sessions[index] = session
                break
        else:
            self._sessions.append(session)
        if session.id == self._active_id:
            self._active_history = session.history
        return self._persist()

    def create(self) -> str:
        """Create a session seeded with the welcome message and make it active."""
        session = Session(
            id=generate_session_id(),
            title=DEFAULT_TITLE,
            history=[WELCOME_MESSAGE.model_copy(deep=True)],
        )
        self._sessions.append(session)
        self._persist()
        self.set_active(session.id)
        logger.info(f"Created chat session {session.id}")
        return session.id

    def delete(self, session_id: str) -> bool:
        """Remove a session. Clears the active pointer if it pointed there."""
        remaining = [s for s in self._sessions if s.id != session_id]
        if len(remaining) == len(self._sessions):
            return False
        self._sessions = remaining
        self._persist()
        if self._active_id == session_id:
            self._active_id = None
            self._active_history = None
        logger.info(f"Deleted chat session {session_id}")
        return True

    def set_active(self, session_id: str) -> bool:
        session = self.get(session_id)
        if session is None:
            return False
        self._active_id = session.id
        self._active_history = session.history
        return True

    def current(self) -> Session:
        """Return the active session, selecting or creating one if needed."""
        if self._active_id is not None:
            session = self.get(self._active_id)
            if session is not None:
                return session
        if self._sessions:
            self.set_active(self._sessions[0].id)
            return self._sessions[0]
        self.create()
        return self._sessions[-1]
