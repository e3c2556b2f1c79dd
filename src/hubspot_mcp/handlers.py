"""Wires the tool catalog and invoker into a protocol server."""

from __future__ import annotations

import json
import logging

from hubspot_mcp import __version__
from hubspot_mcp.context import RequestContext
from hubspot_mcp.server import Server
from hubspot_mcp.tools import ToolInvoker, list_tools
from hubspot_mcp.types import (
    CallToolRequestParams,
    CallToolResult,
    JSONRPCRequest,
    ListToolsRequestParams,
    ListToolsResult,
    TextContent,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "hubspot-mcp"

INSTRUCTIONS = (
    "Read-only access to HubSpot CRM. Every tool returns an envelope with ok=true and "
    "count/results/paging, or ok=false and an error string."
)


def create_server(invoker: ToolInvoker, *, name: str = SERVER_NAME, version: str = __version__) -> Server:
    server = Server(name=name, version=version, instructions=INSTRUCTIONS)

    @server.request_handler("tools/list")
    async def handle_list_tools(ctx: RequestContext, request: JSONRPCRequest) -> ListToolsResult:
        # The catalog is fixed and fits in one page, so any cursor is ignored.
        ListToolsRequestParams.model_validate(request.params or {})
        return ListToolsResult(tools=list_tools())

    @server.request_handler("tools/call")
    async def handle_call_tool(ctx: RequestContext, request: JSONRPCRequest) -> CallToolResult:
        params = CallToolRequestParams.model_validate(request.params or {})
        logger.info("Calling tool %s", params.name)
        result = await invoker.invoke(params.name, params.arguments)
        envelope = result.to_dict()
        if not result.ok:
            logger.warning("Tool %s failed: %s", params.name, result.error)
        return CallToolResult(
            content=[TextContent(text=json.dumps(envelope))],
            structured_content=envelope,
            is_error=not result.ok,
        )

    return server
