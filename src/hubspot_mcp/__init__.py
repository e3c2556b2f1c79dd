"""Read-only HubSpot CRM tools served over the MCP HTTP+SSE transport."""

__version__ = "1.0.0"

from hubspot_mcp.config import Settings, load_settings  # noqa: E402
from hubspot_mcp.exceptions import (  # noqa: E402
    ConfigurationError,
    HubSpotError,
    HubSpotMCPError,
    SessionNotFoundError,
)
from hubspot_mcp.transport import create_app  # noqa: E402

__all__ = [
    "ConfigurationError",
    "HubSpotError",
    "HubSpotMCPError",
    "SessionNotFoundError",
    "Settings",
    "__version__",
    "create_app",
    "load_settings",
]
