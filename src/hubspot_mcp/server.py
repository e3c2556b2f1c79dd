"""Protocol server - JSON-RPC handler registry and dispatch.

No I/O and no transport knowledge. The session router feeds it one message at
a time together with the sink the response should go to.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from hubspot_mcp.context import RequestContext, ResponseSink
from hubspot_mcp.session import SessionInfo
from hubspot_mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    SUPPORTED_PROTOCOL_VERSIONS,
    EmptyResult,
    Implementation,
    InitializeRequestParams,
    InitializeResult,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    ServerCapabilities,
)
from hubspot_mcp.types.json_rpc import error_response

logger = logging.getLogger(__name__)

RequestHandler = Callable[[RequestContext, JSONRPCRequest], Awaitable[Any]]
NotificationHandler = Callable[[RequestContext, JSONRPCNotification], Awaitable[None]]


class Server:
    """Handler registry plus the ``initialize`` handshake.

    Usage:
        server = Server(name="hubspot-mcp", version="1.0.0")

        @server.request_handler("tools/list")
        async def list_tools(ctx: RequestContext, request: JSONRPCRequest):
            return ListToolsResult(tools=[...])

        session_info = await server.handle_message(sink, message, session=session_info)
    """

    def __init__(self, *, name: str, version: str, instructions: str | None = None) -> None:
        self.name = name
        self.version = version
        self.instructions = instructions
        self._request_handlers: dict[str, RequestHandler] = {}
        self._notification_handlers: dict[str, NotificationHandler] = {}

        self.request_handler("ping")(_handle_ping)
        self.notification_handler("notifications/initialized")(_ignore_notification)
        self.notification_handler("notifications/cancelled")(_ignore_notification)

    def request_handler(self, method: str) -> Callable[[RequestHandler], RequestHandler]:
        """Decorator to register a request handler for a given method."""

        def decorator(fn: RequestHandler) -> RequestHandler:
            self._request_handlers[method] = fn
            return fn

        return decorator

    def notification_handler(self, method: str) -> Callable[[NotificationHandler], NotificationHandler]:
        """Decorator to register a notification handler for a given method."""

        def decorator(fn: NotificationHandler) -> NotificationHandler:
            self._notification_handlers[method] = fn
            return fn

        return decorator

    def get_capabilities(self) -> ServerCapabilities:
        caps = ServerCapabilities()
        if "tools/list" in self._request_handlers or "tools/call" in self._request_handlers:
            caps.tools = {"listChanged": False}
        return caps

    async def handle_message(
        self,
        sink: ResponseSink,
        message: JSONRPCMessage,
        *,
        session: SessionInfo | None = None,
    ) -> SessionInfo | None:
        """Handle one inbound message. Returns the new SessionInfo after an ``initialize`` request.

        Requests always produce exactly one response on ``sink``. Notifications
        and client responses produce nothing.
        """
        if isinstance(message, JSONRPCRequest):
            if message.method == "initialize":
                return await self._handle_initialize(sink, message)
            ctx = RequestContext(session=session, request_id=message.id)
            await sink.send_result(await self.dispatch_request(ctx, message))
            return None

        if isinstance(message, JSONRPCNotification):
            await self.dispatch_notification(RequestContext(session=session, request_id=None), message)
            return None

        # This server never sends requests to the client, so there is nothing
        # waiting for a response.
        logger.debug("Ignoring unsolicited client response %s", message.id)
        return None

    async def dispatch_request(self, ctx: RequestContext, request: JSONRPCRequest) -> JSONRPCResponse:
        handler = self._request_handlers.get(request.method)
        if handler is None:
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")
        try:
            result = await handler(ctx, request)
        except ValidationError as err:
            return error_response(request.id, INVALID_PARAMS, f"Invalid params for {request.method}: {err}")
        except Exception as err:
            logger.exception("Handler error for %s", request.method)
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {err}")

        if isinstance(result, BaseModel):
            result_data = result.model_dump(by_alias=True, exclude_none=True)
        elif isinstance(result, dict):
            result_data = result
        else:
            result_data = {}
        return JSONRPCResultResponse(id=request.id, result=result_data)

    async def dispatch_notification(self, ctx: RequestContext, notification: JSONRPCNotification) -> None:
        handler = self._notification_handlers.get(notification.method)
        if handler is None:
            logger.debug("No handler for notification %s", notification.method)
            return
        try:
            await handler(ctx, notification)
        except Exception:
            logger.exception("Notification handler error for %s", notification.method)

    async def _handle_initialize(self, sink: ResponseSink, request: JSONRPCRequest) -> SessionInfo | None:
        try:
            params = InitializeRequestParams.model_validate(request.params or {})
        except ValidationError as err:
            await sink.send_result(error_response(request.id, INVALID_PARAMS, f"Invalid initialize params: {err}"))
            return None

        requested = params.protocol_version
        protocol_version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        result = InitializeResult(
            protocol_version=protocol_version,
            capabilities=self.get_capabilities(),
            server_info=Implementation(name=self.name, version=self.version),
            instructions=self.instructions,
        )
        await sink.send_result(
            JSONRPCResultResponse(id=request.id, result=result.model_dump(by_alias=True, exclude_none=True))
        )
        logger.info(
            "Client %s %s initialized (protocol %s)",
            params.client_info.name,
            params.client_info.version,
            protocol_version,
        )
        return SessionInfo(
            client_info=params.client_info,
            client_capabilities=params.capabilities,
            protocol_version=protocol_version,
        )


async def _handle_ping(ctx: RequestContext, request: JSONRPCRequest) -> EmptyResult:
    return EmptyResult()


async def _ignore_notification(ctx: RequestContext, notification: JSONRPCNotification) -> None:
    logger.debug("Received %s", notification.method)
