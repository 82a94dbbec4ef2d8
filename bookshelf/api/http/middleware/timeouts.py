"""Per-connection read and write deadlines for slow clients."""

from __future__ import annotations

import asyncio
import json

from loguru import logger
from starlette.types import ASGIApp, Message, Receive, Scope, Send

READ_TIMEOUT_STATUS = 408


class WriteTimeout(Exception):
    """The client stopped reading the response."""


class ConnectionTimeoutMiddleware:
    """Bounds every ``receive()`` while the body is incomplete and every ``send()``.

    When the body stalls, the application is told the client disconnected,
    whatever it answers is discarded, and the client gets a 408 instead. A
    write timeout abandons the response, and the server closes the connection.
    """

    def __init__(self, app: ASGIApp, read_timeout: float, write_timeout: float) -> None:
        self.app = app
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        body_complete = False
        read_timed_out = False
        response_started = False

        async def timed_receive() -> Message:
            nonlocal body_complete, read_timed_out
            if read_timed_out:
                return {"type": "http.disconnect"}
            if body_complete:
                # Only disconnect notifications remain; those may take forever
                return await receive()
            try:
                message = await asyncio.wait_for(receive(), self.read_timeout)
            except TimeoutError:
                logger.warning("Read timeout on {} {}", scope["method"], scope["path"])
                read_timed_out = True
                return {"type": "http.disconnect"}
            if message["type"] == "http.request" and not message.get("more_body", False):
                body_complete = True
            return message

        async def timed_send(message: Message) -> None:
            nonlocal response_started
            if read_timed_out and not response_started:
                return
            if message["type"] == "http.response.start":
                response_started = True
            try:
                await asyncio.wait_for(send(message), self.write_timeout)
            except TimeoutError:
                raise WriteTimeout() from None

        try:
            await self.app(scope, timed_receive, timed_send)
        except WriteTimeout:
            logger.warning(
                "Write timeout on {} {}; abandoning response", scope["method"], scope["path"]
            )
            return
        except Exception as exc:
            if not read_timed_out:
                raise
            logger.debug("Application gave up after read timeout: {!r}", exc)

        if read_timed_out and not response_started:
            await self._send_read_timeout(send)

    async def _send_read_timeout(self, send: Send) -> None:
        body = {"detail": f"Request body not received within {self.read_timeout:g}s"}
        await send(
            {
                "type": "http.response.start",
                "status": READ_TIMEOUT_STATUS,
                "headers": [(b"content-type", b"application/json")],
            }
        )
        await send({"type": "http.response.body", "body": json.dumps(body).encode()})
