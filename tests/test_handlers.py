"""Tests for the tools/list and tools/call handlers wired by ``create_server``."""

import json

import pytest

from hubspot_mcp import __version__
from hubspot_mcp.handlers import create_server
from hubspot_mcp.hubspot import HubSpotClient
from hubspot_mcp.server import Server
from hubspot_mcp.tools import TOOL_DEFINITIONS, ToolInvoker
from hubspot_mcp.types import (
    INVALID_PARAMS,
    JSONRPCErrorResponse,
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


@pytest.fixture
def server(hubspot: HubSpotClient) -> Server:
    return create_server(ToolInvoker(hubspot))


async def _call(server: Server, method: str, params: dict | None = None) -> JSONRPCResponse:
    sink = ListSink()
    await server.handle_message(sink, JSONRPCRequest(id=1, method=method, params=params))
    [response] = sink.responses
    return response


async def test_server_identity(server: Server):
    assert server.name == "hubspot-mcp"
    assert server.version == __version__
    assert server.get_capabilities().tools == {"listChanged": False}


async def test_tools_list(server: Server):
    response = await _call(server, "tools/list")

    assert isinstance(response, JSONRPCResultResponse)
    tools = response.result["tools"]
    assert [tool["name"] for tool in tools] == [definition.name for definition in TOOL_DEFINITIONS]
    for tool in tools:
        assert tool["inputSchema"]["type"] == "object"
        assert tool["annotations"]["readOnlyHint"] is True


async def test_tools_call_success(server: Server, fake_hubspot):
    fake_hubspot.respond(json_body={"results": [{"id": "11"}]})

    response = await _call(server, "tools/call", {"name": "hubspot.deals.search", "arguments": {"stage": "closedwon"}})

    assert isinstance(response, JSONRPCResultResponse)
    envelope = {"ok": True, "count": 1, "results": [{"id": "11"}], "paging": None}
    structured = response.result["structuredContent"]
    assert (structured["ok"], structured["count"], structured["results"]) == (True, 1, [{"id": "11"}])
    assert response.result["isError"] is False
    [content] = response.result["content"]
    assert content["type"] == "text"
    assert json.loads(content["text"]) == envelope


async def test_tools_call_failure_sets_is_error(server: Server, fake_hubspot):
    fake_hubspot.respond(403, text="forbidden")

    response = await _call(server, "tools/call", {"name": "hubspot.owners.list"})

    assert isinstance(response, JSONRPCResultResponse)
    assert response.result["isError"] is True
    assert response.result["structuredContent"] == {"ok": False, "error": "HubSpot 403 forbidden"}


async def test_tools_call_unknown_tool_is_a_failure_envelope(server: Server, fake_hubspot):
    response = await _call(server, "tools/call", {"name": "hubspot.nope", "arguments": {}})

    assert isinstance(response, JSONRPCResultResponse)
    assert response.result["structuredContent"] == {"ok": False, "error": "Unknown tool: 'hubspot.nope'"}
    assert fake_hubspot.requests == []


async def test_tools_call_without_name_is_invalid_params(server: Server):
    response = await _call(server, "tools/call", {"arguments": {}})

    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INVALID_PARAMS
