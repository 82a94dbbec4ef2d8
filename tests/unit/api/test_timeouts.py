"""Tests for the per-connection read and write deadlines."""

import asyncio
import json

import pytest
from starlette.types import Message, Receive, Scope, Send

from bookshelf.api.http.app import create_app
from bookshelf.api.http.app_data import ApplicationDependencies
from bookshelf.api.http.middleware.timeouts import ConnectionTimeoutMiddleware
from bookshelf.runtime.config.config_data import AppConfig, ConfigData

SCOPE: Scope = {"type": "http", "method": "POST", "path": "/categories", "headers": []}


async def _never() -> Message:
    await asyncio.Event().wait()
    raise AssertionError("unreachable")


async def _read_body_then_ok(scope: Scope, receive: Receive, send: Send) -> None:
    while True:
        message = await receive()
        if not message.get("more_body", False):
            break
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def __call__(self, message: Message) -> None:
        self.messages.append(message)


class TestReadTimeout:
    @pytest.mark.asyncio
    async def test_stalled_body_gets_408(self):
        middleware = ConnectionTimeoutMiddleware(
            _read_body_then_ok, read_timeout=0.05, write_timeout=1
        )
        sent = _Recorder()

        await middleware(SCOPE, _never, sent)

        assert sent.messages[0]["status"] == 408
        body = json.loads(sent.messages[1]["body"])
        assert "not received" in body["detail"]

    @pytest.mark.asyncio
    async def test_app_failure_after_stall_still_gets_408(self):
        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            if (await receive())["type"] == "http.disconnect":
                raise RuntimeError("client went away")

        middleware = ConnectionTimeoutMiddleware(app, read_timeout=0.05, write_timeout=1)
        sent = _Recorder()

        await middleware(SCOPE, _never, sent)

        assert sent.messages[0]["status"] == 408

    @pytest.mark.asyncio
    async def test_complete_body_passes_through(self):
        chunks = [
            {"type": "http.request", "body": b"{", "more_body": True},
            {"type": "http.request", "body": b"}", "more_body": False},
        ]

        async def receive() -> Message:
            return chunks.pop(0)

        middleware = ConnectionTimeoutMiddleware(
            _read_body_then_ok, read_timeout=0.05, write_timeout=1
        )
        sent = _Recorder()

        await middleware(SCOPE, receive, sent)

        assert sent.messages[0]["status"] == 200
        assert sent.messages[1]["body"] == b"ok"

    @pytest.mark.asyncio
    async def test_waiting_for_disconnect_is_unbounded(self):
        """After the body is read, receive() only reports disconnects."""
        messages = [
            {"type": "http.request", "body": b"", "more_body": False},
            {"type": "http.disconnect"},
        ]

        async def receive() -> Message:
            message = messages.pop(0)
            if message["type"] == "http.disconnect":
                await asyncio.sleep(0.1)
            return message

        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            await receive()
            assert (await receive())["type"] == "http.disconnect"
            await send({"type": "http.response.start", "status": 204, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        middleware = ConnectionTimeoutMiddleware(app, read_timeout=0.01, write_timeout=1)
        sent = _Recorder()

        await middleware(SCOPE, receive, sent)

        assert sent.messages[0]["status"] == 204

    @pytest.mark.asyncio
    async def test_application_stack_answers_408(
        self, app_dependencies: ApplicationDependencies
    ):
        app = create_app(
            app_dependencies, config=ConfigData(app=AppConfig(read_timeout=0.1))
        )
        app.state.app_dependencies = app_dependencies
        scope: Scope = {
            "type": "http",
            "asgi": {"version": "3.0", "spec_version": "2.3"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": "/categories",
            "raw_path": b"/categories",
            "root_path": "",
            "query_string": b"",
            "headers": [
                (b"host", b"testserver"),
                (b"content-type", b"application/json"),
                (b"content-length", b"20"),
            ],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 80),
        }
        sent = _Recorder()

        await asyncio.wait_for(app(scope, _never, sent), 5)

        assert sent.messages[0]["type"] == "http.response.start"
        assert sent.messages[0]["status"] == 408
        assert "not received" in json.loads(sent.messages[1]["body"])["detail"]
        assert len(sent.messages) == 2


class TestWriteTimeout:
    @pytest.mark.asyncio
    async def test_stalled_client_abandons_response(self):
        async def receive() -> Message:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def stalled_send(message: Message) -> None:
            await asyncio.Event().wait()

        middleware = ConnectionTimeoutMiddleware(
            _read_body_then_ok, read_timeout=1, write_timeout=0.05
        )

        # Returns instead of hanging or raising
        await asyncio.wait_for(middleware(SCOPE, receive, stalled_send), 1)


class TestPassThrough:
    @pytest.mark.asyncio
    async def test_non_http_scopes_are_untouched(self):
        seen: list[Scope] = []

        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            seen.append(scope)

        middleware = ConnectionTimeoutMiddleware(app, read_timeout=0.01, write_timeout=0.01)

        await middleware({"type": "lifespan"}, _never, _Recorder())

        assert seen == [{"type": "lifespan"}]
