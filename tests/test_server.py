"""Tests for the protocol server: handshake, dispatch and error mapping."""

from typing import Any

import pytest
from pydantic import BaseModel

from hubspot_mcp.context import RequestContext
from hubspot_mcp.server import Server
from hubspot_mcp.session import SessionInfo
from hubspot_mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    Implementation,
    JSONRPCErrorResponse,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
)

pytestmark = pytest.mark.anyio


class ListSink:
    def __init__(self) -> None:
        self.responses: list[JSONRPCResponse] = []

    async def send_result(self, response: JSONRPCResponse) -> None:
        self.responses.append(response)


class StrictParams(BaseModel):
    value: int


def _make_server(seen: list[RequestContext] | None = None) -> Server:
    server = Server(name="test-server", version="0.1.0", instructions="Be nice.")
    seen = seen if seen is not None else []

    @server.request_handler("test/echo")
    async def echo(ctx: RequestContext, request: JSONRPCRequest) -> dict[str, Any]:
        seen.append(ctx)
        return {"echo": request.params}

    @server.request_handler("test/strict")
    async def strict(ctx: RequestContext, request: JSONRPCRequest) -> StrictParams:
        return StrictParams.model_validate(request.params or {})

    @server.request_handler("test/boom")
    async def boom(ctx: RequestContext, request: JSONRPCRequest) -> None:
        raise RuntimeError("kaboom")

    @server.request_handler("tools/list")
    async def list_tools(ctx: RequestContext, request: JSONRPCRequest) -> dict[str, Any]:
        return {"tools": []}

    return server


def _init_request(protocol_version: str = LATEST_PROTOCOL_VERSION) -> JSONRPCRequest:
    return JSONRPCRequest(
        id=1,
        method="initialize",
        params={
            "protocolVersion": protocol_version,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "0.1.0"},
        },
    )


async def test_initialize_negotiates_and_returns_session_info():
    server = _make_server()
    sink = ListSink()

    info = await server.handle_message(sink, _init_request("2024-11-05"))

    assert info == SessionInfo(
        client_info=Implementation(name="test-client", version="0.1.0"),
        client_capabilities=info.client_capabilities,
        protocol_version="2024-11-05",
    )
    [response] = sink.responses
    assert isinstance(response, JSONRPCResultResponse)
    assert response.id == 1
    assert response.result == {
        "protocolVersion": "2024-11-05",
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": "test-server", "version": "0.1.0"},
        "instructions": "Be nice.",
    }


async def test_initialize_falls_back_to_latest_version():
    server = _make_server()
    sink = ListSink()

    info = await server.handle_message(sink, _init_request("1999-01-01"))

    assert info is not None
    assert info.protocol_version == LATEST_PROTOCOL_VERSION
    assert sink.responses[0].result["protocolVersion"] == LATEST_PROTOCOL_VERSION  # type: ignore[union-attr]


async def test_initialize_with_bad_params_is_invalid_params():
    server = _make_server()
    sink = ListSink()

    info = await server.handle_message(sink, JSONRPCRequest(id=9, method="initialize", params={}))

    assert info is None
    [response] = sink.responses
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.id == 9
    assert response.error.code == INVALID_PARAMS


async def test_ping_returns_empty_result():
    sink = ListSink()
    await _make_server().handle_message(sink, JSONRPCRequest(id="p", method="ping"))

    [response] = sink.responses
    assert isinstance(response, JSONRPCResultResponse)
    assert (response.id, response.result) == ("p", {})


async def test_request_context_carries_session_info():
    seen: list[RequestContext] = []
    server = _make_server(seen)
    sink = ListSink()
    info = await server.handle_message(sink, _init_request())

    await server.handle_message(sink, JSONRPCRequest(id=2, method="test/echo", params={"a": 1}), session=info)

    response = sink.responses[-1]
    assert isinstance(response, JSONRPCResultResponse)
    assert (response.id, response.result) == (2, {"echo": {"a": 1}})
    [ctx] = seen
    assert ctx.session is info
    assert ctx.request_id == 2


async def test_unknown_method():
    sink = ListSink()
    await _make_server().handle_message(sink, JSONRPCRequest(id=3, method="resources/list"))

    [response] = sink.responses
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == METHOD_NOT_FOUND
    assert response.error.message == "Method not found: resources/list"


async def test_validation_error_maps_to_invalid_params():
    sink = ListSink()
    await _make_server().handle_message(sink, JSONRPCRequest(id=4, method="test/strict", params={"value": "x"}))

    [response] = sink.responses
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INVALID_PARAMS


async def test_handler_exception_maps_to_internal_error():
    sink = ListSink()
    await _make_server().handle_message(sink, JSONRPCRequest(id=5, method="test/boom"))

    [response] = sink.responses
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.id == 5
    assert response.error.code == INTERNAL_ERROR
    assert response.error.message == "Internal error: kaboom"


async def test_notifications_and_client_responses_produce_nothing():
    server = _make_server()
    sink = ListSink()

    await server.handle_message(sink, JSONRPCNotification(method="notifications/initialized"))
    await server.handle_message(sink, JSONRPCNotification(method="notifications/unknown"))
    await server.handle_message(sink, JSONRPCResultResponse(id=10, result={}))

    assert sink.responses == []
