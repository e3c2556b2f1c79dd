"""HubSpot query tools: input contracts, catalog and invoker."""

from hubspot_mcp.tools.catalog import TOOL_DEFINITIONS, ToolDefinition, get_tool_definition, list_tools
from hubspot_mcp.tools.invoker import BATCH_GROUP_SIZE, ToolInvoker
from hubspot_mcp.tools.results import ToolResult

__all__ = [
    "BATCH_GROUP_SIZE",
    "TOOL_DEFINITIONS",
    "ToolDefinition",
    "ToolInvoker",
    "ToolResult",
    "get_tool_definition",
    "list_tools",
]
