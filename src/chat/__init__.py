"""Client-side chat session management.

Keeps several independent conversations, persists them in per-browser
storage and runs one exchange with the chat API at a time.

Responsibilities:
    - Session registry with defensive load and write-through save
    - Send/receive cycle with streaming and whole-body replies
    - Projection of session state onto the message and session lists

Holds no UI toolkit code; the NiceGUI page plugs in through ChatView.
"""

from src.chat.client import ChatApiClient, ChatReply, ChatRequestError
from src.chat.config import ClientConfig, get_client_config
from src.chat.controller import ConversationController, SendGate
from src.chat.presenter import ChatPresenter, ChatView, SessionListItem
from src.chat.session_store import SessionStore
from src.chat.storage import MappingStorage, StorageQuotaError

__all__ = [
    "ChatApiClient",
    "ChatPresenter",
    "ChatReply",
    "ChatRequestError",
    "ChatView",
    "ClientConfig",
    "ConversationController",
    "MappingStorage",
    "SendGate",
    "SessionListItem",
    "SessionStore",
    "StorageQuotaError",
    "get_client_config",
]
