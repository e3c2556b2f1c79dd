from hubspot_mcp.hubspot.client import DEFAULT_BASE_URL, HubSpotClient, create_hubspot_http_client

__all__ = ["DEFAULT_BASE_URL", "HubSpotClient", "create_hubspot_http_client"]
