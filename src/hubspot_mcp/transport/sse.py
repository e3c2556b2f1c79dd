"""
SSE Session Router

This module implements the server side of the MCP HTTP+SSE transport. A
client holds open one ``GET`` stream per session and posts every JSON-RPC
message it sends to a separate endpoint, naming the session in the query
string. The router ties the two together:

- ``handle_sse`` opens a session, tells the client where to post (the first
  ``endpoint`` event) and streams the session's responses as ``message``
  events until the client goes away.
- ``handle_post_message`` finds the session named by ``sessionId`` and queues
  the message for it. The HTTP response is only an acknowledgement (``202``);
  the JSON-RPC response travels down the session's stream.

Each session has one handler task, started in the router's task group, that
takes messages off the session's queue in order. A slow tool call therefore
delays later messages on the same session and nothing else.

Example usage:
```
    router = SseSessionRouter(server, message_path="/messages")

    routes = [
        Route("/sse", endpoint=ASGIEndpoint(router.handle_sse), methods=["GET"]),
        Route("/messages", endpoint=ASGIEndpoint(router.handle_post_message), methods=["POST"]),
    ]

    async with router.run():
        ...  # serve the Starlette app
```
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from http import HTTPStatus
from urllib.parse import quote

import anyio
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectReceiveStream
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from hubspot_mcp.exceptions import SessionNotFoundError
from hubspot_mcp.server import Server
from hubspot_mcp.session import ServerSentEvent, Session, SessionRegistry
from hubspot_mcp.types import INVALID_REQUEST, PARSE_ERROR, JSONRPCMessage, JSONRPCMessageAdapter
from hubspot_mcp.types.json_rpc import error_response

logger = logging.getLogger(__name__)

SESSION_ID_PARAM = "sessionId"
# Accepted as well, for clients built against the snake_case spelling.
SESSION_ID_PARAM_ALIAS = "session_id"

# Maximum size for incoming messages
MAXIMUM_MESSAGE_SIZE = 4 * 1024 * 1024  # 4MB

# Messages posted while the handler is busy wait here; a full queue makes the
# POST wait instead of growing memory without bound.
INBOUND_BUFFER_SIZE = 32
OUTBOUND_BUFFER_SIZE = 32


class SseSessionRouter:
    """
    Owns the session registry and routes posted messages to open sessions.

    Important: ``run()`` must be active while requests are served; it owns the
    task group the per-session handler tasks live in. Like the registry, a
    router is used for a single server lifetime.

    Args:
        server: The protocol server that handles each message
        message_path: Path clients post messages to, announced in the
                      ``endpoint`` event
        registry: Registry to keep sessions in; a fresh one by default
    """

    def __init__(
        self,
        server: Server,
        message_path: str = "/messages",
        *,
        registry: SessionRegistry | None = None,
    ) -> None:
        self.server = server
        self.message_path = message_path
        self.registry = registry if registry is not None else SessionRegistry()

        self._task_group: TaskGroup | None = None
        self._has_started = False

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Run the router's task group. All sessions are closed when this exits."""
        if self._has_started:
            raise RuntimeError(
                "SseSessionRouter .run() can only be called once per instance. "
                "Create a new instance if you need to run again."
            )
        self._has_started = True

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("SSE session router started")
            try:
                yield
            finally:
                logger.info("SSE session router shutting down")
                for session in self.registry.clear():
                    session.close()
                tg.cancel_scope.cancel()
                self._task_group = None

    def open_session(self) -> tuple[Session, MemoryObjectReceiveStream[ServerSentEvent]]:
        """
        Create and register a session and start its handler task.

        Returns:
            The new session and the receive side of its outbound event stream,
            which the caller is responsible for draining to the client
        """
        if self._task_group is None:
            raise RuntimeError("Task group is not initialized. Make sure to use run().")

        outbound_writer, outbound_reader = anyio.create_memory_object_stream[ServerSentEvent](OUTBOUND_BUFFER_SIZE)
        inbound_writer, inbound_reader = anyio.create_memory_object_stream[JSONRPCMessage](INBOUND_BUFFER_SIZE)
        session = Session(outbound=outbound_writer, inbound=inbound_writer)

        self.registry.insert(session)
        self._task_group.start_soon(self._serve_session, session, inbound_reader)
        logger.info(f"Opened session {session.session_id}")
        return session, outbound_reader

    def close_session(self, session_id: str) -> None:
        """Remove a session and close its streams. Unknown or already closed ids are ignored."""
        session = self.registry.remove(session_id)
        if session is None:
            return
        session.close()
        logger.info(f"Closed session {session_id}")

    async def dispatch(self, session_id: str, message: JSONRPCMessage) -> None:
        """
        Queue ``message`` for the session named ``session_id``.

        Raises:
            SessionNotFoundError: no open session has that id
        """
        session = self.registry.lookup(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        try:
            await session.inbound.send(message)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError) as err:
            # Closed while we waited for room in its queue.
            raise SessionNotFoundError(session_id) from err

    async def handle_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI endpoint that opens a session and streams its events until disconnect."""
        session, outbound_reader = self.open_session()
        try:
            root_path = scope.get("root_path", "")
            endpoint = f"{quote(root_path + self.message_path)}?{SESSION_ID_PARAM}={session.session_id}"
            await session.send_event("endpoint", endpoint)

            async with outbound_reader:
                response = EventSourceResponse(content=outbound_reader)
                await response(scope, receive, send)
        finally:
            self.close_session(session.session_id)

    async def handle_post_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI endpoint that accepts one JSON-RPC message for an open session."""
        request = Request(scope, receive)
        session_id = request.query_params.get(SESSION_ID_PARAM) or request.query_params.get(SESSION_ID_PARAM_ALIAS)
        if not session_id:
            response = Response(f"{SESSION_ID_PARAM} is required", status_code=HTTPStatus.BAD_REQUEST)
            await response(scope, receive, send)
            return

        session = self.registry.lookup(session_id)
        if session is None:
            logger.warning(f"Rejected message for unknown session {session_id}")
            response = Response("No transport found for sessionId", status_code=HTTPStatus.BAD_REQUEST)
            await response(scope, receive, send)
            return

        body = await request.body()
        if len(body) > MAXIMUM_MESSAGE_SIZE:
            response = Response(
                "Payload Too Large: Message exceeds maximum size",
                status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            )
            await response(scope, receive, send)
            return

        try:
            message = JSONRPCMessageAdapter.validate_json(body)
        except ValidationError as err:
            logger.warning(f"Could not parse message for session {session_id}")
            if any(error["type"] == "json_invalid" for error in err.errors()):
                reply = error_response(None, PARSE_ERROR, f"Parse error: {err}")
            else:
                reply = error_response(None, INVALID_REQUEST, f"Invalid Request: {err}")
            await session.send_message(reply)
            response = Response("Could not parse message", status_code=HTTPStatus.BAD_REQUEST)
            await response(scope, receive, send)
            return

        try:
            await self.dispatch(session_id, message)
        except SessionNotFoundError:
            response = Response("No transport found for sessionId", status_code=HTTPStatus.BAD_REQUEST)
            await response(scope, receive, send)
            return

        response = Response("Accepted", status_code=HTTPStatus.ACCEPTED)
        await response(scope, receive, send)

    async def _serve_session(self, session: Session, inbound: MemoryObjectReceiveStream[JSONRPCMessage]) -> None:
        async with inbound:
            async for message in inbound:
                if not session.is_open:
                    break
                try:
                    info = await self.server.handle_message(session, message, session=session.info)
                except Exception:
                    logger.exception(f"Session {session.session_id} failed to handle a message")
                    continue
                if info is not None:
                    session.info = info
        logger.debug(f"Handler for session {session.session_id} finished")
