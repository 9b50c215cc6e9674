"""Unit tests for ConversationController and SendGate."""

import asyncio
import json

import httpx
import pytest
import pytest_check as check

from src.chat.client import ChatApiClient
from src.chat.config import ClientConfig
from src.chat.controller import ERROR_MESSAGE, ConversationController, SendGate
from src.chat.presenter import ChatPresenter
from src.chat.rendering import message_to_html
from src.chat.session_store import STORAGE_KEY, WELCOME_MESSAGE, SessionStore
from src.chat.storage import MappingStorage
from src.models.schemas import Message
from tests.conftest import RecordingView

HI_THERE = {
    "output": [
        {
            "type": "message",
            "role": "assistant",
            "content": [{"type": "output_text", "text": "Hi there"}],
        }
    ]
}


def _controller(presenter: ChatPresenter, config: ClientConfig, handler) -> ConversationController:
    client = ChatApiClient(config, transport=httpx.MockTransport(handler))
    return ConversationController(presenter, client)


async def _wait_for(condition) -> None:
    for _ in range(1000):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestSendGate:
    """Tests for the per-page send flag."""

    def test_acquire_is_exclusive(self) -> None:
        gate = SendGate()

        assert gate.try_acquire() is True
        assert gate.try_acquire() is False
        assert gate.busy

    def test_release_allows_next_acquire(self) -> None:
        gate = SendGate()
        gate.try_acquire()

        gate.release()

        assert gate.try_acquire() is True


class TestRejectedSends:
    """Sends that must not change any state."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    async def test_blank_input_is_ignored(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        client_config: ClientConfig,
        text: str,
    ) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=HI_THERE)

        controller = _controller(presenter, client_config, handler)
        events = list(view.events)

        assert await controller.send(text) is False

        check.equal(calls, [])
        check.equal(presenter.store.current().history, [WELCOME_MESSAGE])
        check.equal(view.events, events)

    async def test_send_while_busy_is_ignored(
        self, presenter: ChatPresenter, client_config: ClientConfig
    ) -> None:
        """A second send during an exchange makes no call and adds no message."""
        calls: list[httpx.Request] = []
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            await release.wait()
            return httpx.Response(200, json=HI_THERE)

        controller = _controller(presenter, client_config, handler)
        first = asyncio.create_task(controller.send("first"))
        await _wait_for(lambda: calls)

        check.is_true(controller.sending)
        check.is_false(await controller.send("second"))
        check.equal(len(calls), 1)
        check.equal(
            [m.content for m in presenter.store.current().history if m.role == "user"],
            ["first"],
        )

        release.set()
        assert await first is True
        assert not controller.sending


class TestExchange:
    """Tests for complete send/receive cycles."""

    async def test_non_streaming_reply(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        storage: MappingStorage,
        client_config: ClientConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=HI_THERE)

        controller = _controller(presenter, client_config, handler)
        events_before = len(view.events)

        assert await controller.send("  Hello?  ") is True

        history = presenter.store.current().history
        check.equal(
            history,
            [
                WELCOME_MESSAGE,
                Message(role="user", content="Hello?"),
                Message(role="assistant", content="Hi there"),
            ],
        )
        check.equal(json.loads(storage.get(STORAGE_KEY))[0]["history"][-1]["content"], "Hi there")
        check.equal(view.messages[-1], ("assistant", "Hi there"))
        check.equal(
            view.events[events_before:],
            ["disable", "append:user", "thinking", "hide_thinking", "append:assistant", "enable"],
        )
        check.is_true(view.input_enabled)
        check.equal(view.focus_count, 1)

    async def test_request_carries_flattened_transcript(
        self, presenter: ChatPresenter, client_config: ClientConfig
    ) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=HI_THERE)

        controller = _controller(presenter, client_config, handler)
        await controller.send("one")
        await controller.send("two")

        assert bodies[1]["input"] == "\n".join(
            [WELCOME_MESSAGE.content, "one", "Hi there", "two"]
        )

    async def test_user_message_persisted_before_network_call(
        self,
        presenter: ChatPresenter,
        storage: MappingStorage,
        client_config: ClientConfig,
    ) -> None:
        persisted_at_call: list[list[dict]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            persisted_at_call.append(json.loads(storage.get(STORAGE_KEY))[0]["history"])
            return httpx.Response(200, json=HI_THERE)

        await _controller(presenter, client_config, handler).send("durable")

        assert persisted_at_call[0][-1] == {"role": "user", "content": "durable"}

    async def test_streaming_reply(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        client_config: ClientConfig,
    ) -> None:
        async def body():
            yield b'{"response":"He"}\n'
            yield b'{"response":"llo"}\n'

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"content-type": "text/event-stream"}, content=body()
            )

        controller = _controller(presenter, client_config, handler)

        await controller.send("greet me")

        check.equal(presenter.store.current().history[-1].content, "Hello")
        check.equal(view.partial_updates, ["He", "Hello"])
        check.equal(view.messages[-1], ("assistant", "Hello"))
        check.equal(view.messages.count(("assistant", "Hello")), 1)
        check.is_false(view.thinking)
        check.is_true(view.input_enabled)

    async def test_http_error_appends_failure_message(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        client_config: ClientConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "Failed to process request"})

        controller = _controller(presenter, client_config, handler)

        assert await controller.send("hello") is True

        check.equal(presenter.store.current().history[-1].content, ERROR_MESSAGE)
        check.equal(view.messages[-1], ("assistant", ERROR_MESSAGE))
        check.is_false(view.thinking)
        check.is_true(view.input_enabled)
        check.is_false(controller.sending)

    async def test_connection_error_releases_gate(
        self, presenter: ChatPresenter, client_config: ClientConfig
    ) -> None:
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            if len(attempts) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=HI_THERE)

        controller = _controller(presenter, client_config, handler)

        await controller.send("first")
        await controller.send("second")

        contents = [m.content for m in presenter.store.current().history]
        assert contents[-3:] == [ERROR_MESSAGE, "second", "Hi there"]
        assert len(attempts) == 2

    async def test_missing_text_uses_placeholder(
        self, presenter: ChatPresenter, client_config: ClientConfig
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"output": [{"type": "reasoning"}]})

        await _controller(presenter, client_config, handler).send("hello")

        assert presenter.store.current().history[-1].content == "[No assistant message found]"

    async def test_storage_failure_does_not_block_exchange(
        self, view: RecordingView, client_config: ClientConfig
    ) -> None:
        store = SessionStore(MappingStorage({}, quota_bytes=1024))
        presenter = ChatPresenter(store, view)
        presenter.start()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=HI_THERE)

        await _controller(presenter, client_config, handler).send("x" * 2000)

        assert store.current().history[-1].content == "Hi there"
        assert view.input_enabled


class TestSwitchDuringExchange:
    """Replies land in the session the exchange started in."""

    async def test_reply_goes_to_originating_session(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        storage: MappingStorage,
        client_config: ClientConfig,
    ) -> None:
        started = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, json=HI_THERE)

        origin = presenter.store.current()
        controller = _controller(presenter, client_config, handler)
        task = asyncio.create_task(controller.send("question"))
        await started.wait()

        other_id = presenter.new_chat()
        release.set()
        await task

        persisted = {s["id"]: s for s in json.loads(storage.get(STORAGE_KEY))}
        check.equal(origin.history[-1].content, "Hi there")
        check.equal(persisted[origin.id]["history"][-1]["content"], "Hi there")
        check.equal(presenter.store.active_id, other_id)
        check.equal(view.messages, [("assistant", message_to_html(WELCOME_MESSAGE))])
        check.equal(presenter.store.get(other_id).history, [WELCOME_MESSAGE])
        check.is_true(view.input_enabled)

    async def test_reply_for_deleted_session_is_dropped(
        self,
        presenter: ChatPresenter,
        view: RecordingView,
        storage: MappingStorage,
        client_config: ClientConfig,
    ) -> None:
        """Deleting the sending session keeps it deleted once the reply arrives."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, json=HI_THERE)

        origin = presenter.store.current()
        controller = _controller(presenter, client_config, handler)
        task = asyncio.create_task(controller.send("question"))
        await started.wait()

        presenter.delete_chat(origin.id)
        replacement_id = presenter.store.active_id
        release.set()
        await task

        persisted_ids = [s["id"] for s in json.loads(storage.get(STORAGE_KEY))]
        check.is_none(presenter.store.get(origin.id))
        check.is_not_in(origin.id, persisted_ids)
        check.equal([item.id for item in view.sessions], [replacement_id])
        check.equal(view.messages, [("assistant", message_to_html(WELCOME_MESSAGE))])
        check.is_true(view.input_enabled)
        check.is_false(controller.sending)
