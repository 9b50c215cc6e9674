"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - storage / store: In-memory key-value storage and a session store on it
    - view / presenter: Recording ChatView and a presenter drawing on it
    - client_config: Client configuration pointing at the test host
    - proxy_config: Proxy configuration with a test token
    - async_client: HTTPX client for API testing with the upstream mocked

Upstream and API calls go through httpx MockTransport / ASGITransport, so
no test touches the network.
"""

from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.api import app
from src.chat.config import ClientConfig
from src.chat.presenter import ChatPresenter, SessionListItem
from src.chat.session_store import SessionStore
from src.chat.storage import MappingStorage
from src.proxy.config import ProxyConfig
from src.proxy.inference import InferenceService, get_inference_service

TEST_BASE_URL = "http://test"

Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordingView:
    """ChatView that records what would have been drawn."""

    messages: list[tuple[str, str]] = field(default_factory=list)
    thinking: bool = False
    partial: str | None = None
    partial_updates: list[str] = field(default_factory=list)
    sessions: list[SessionListItem] = field(default_factory=list)
    input_enabled: bool = True
    focus_count: int = 0
    clear_count: int = 0
    events: list[str] = field(default_factory=list)

    def clear_messages(self) -> None:
        self.messages.clear()
        self.thinking = False
        self.partial = None
        self.clear_count += 1
        self.events.append("clear")

    def append_message(self, role: str, html: str) -> None:
        self.messages.append((role, html))
        self.events.append(f"append:{role}")

    def show_thinking(self) -> None:
        self.thinking = True
        self.events.append("thinking")

    def hide_thinking(self) -> None:
        if self.thinking:
            self.events.append("hide_thinking")
        self.thinking = False

    def show_partial(self, text: str) -> None:
        self.partial = text
        self.partial_updates.append(text)

    def end_partial(self) -> None:
        if self.partial is not None:
            self.messages.append(("assistant", self.partial))
        self.partial = None
        self.events.append("end_partial")

    def render_sessions(self, items: list[SessionListItem]) -> None:
        self.sessions = list(items)

    def set_input_enabled(self, enabled: bool) -> None:
        self.input_enabled = enabled
        self.events.append("enable" if enabled else "disable")

    def focus_input(self) -> None:
        self.focus_count += 1


@pytest.fixture
def storage() -> MappingStorage:
    """Return empty in-memory storage with the default quota."""
    return MappingStorage({})


@pytest.fixture
def store(storage: MappingStorage) -> SessionStore:
    """Return a session store over the in-memory storage."""
    return SessionStore(storage)


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def presenter(store: SessionStore, view: RecordingView) -> ChatPresenter:
    """Return a started presenter (one session, active and painted)."""
    presenter = ChatPresenter(store, view)
    presenter.start()
    return presenter


@pytest.fixture
def client_config() -> ClientConfig:
    """Client configuration pointing at the test host, no reasoning options."""
    return ClientConfig(
        api_base_url=TEST_BASE_URL,
        reasoning_effort=None,
        reasoning_summary=None,
    )


@pytest.fixture
def proxy_config() -> ProxyConfig:
    """Proxy configuration with fixed values independent of the environment."""
    return ProxyConfig(
        account_id="acct-123",
        api_token="test-token",
        model_id="@cf/openai/gpt-oss-120b",
        max_tokens=1024,
        gateway_id="oss-120b-free",
        cache_ttl=3600,
        skip_cache=False,
        system_prompt="Be brief.",
        base_url=None,
    )


@pytest.fixture
def upstream() -> dict[str, Handler]:
    """Mutable slot holding the handler the mocked upstream answers with.

    Tests set `upstream["handler"]` before making requests.
    """
    return {}


@pytest.fixture
async def inference_service(
    proxy_config: ProxyConfig, upstream: dict[str, Handler]
) -> AsyncGenerator[InferenceService]:
    """Inference service whose upstream is an httpx MockTransport."""

    def dispatch(request: httpx.Request) -> httpx.Response:
        return upstream["handler"](request)

    service = InferenceService(config=proxy_config, transport=httpx.MockTransport(dispatch))
    yield service
    await service.aclose()


@pytest.fixture
async def async_client(
    inference_service: InferenceService,
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient talking to the app with the upstream mocked.
    """
    app.dependency_overrides[get_inference_service] = lambda: inference_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=TEST_BASE_URL) as client:
        yield client
    app.dependency_overrides.clear()
