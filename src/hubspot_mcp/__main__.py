import logging
import sys

import click
import uvicorn

from hubspot_mcp.config import load_settings
from hubspot_mcp.exceptions import ConfigurationError
from hubspot_mcp.transport import create_app
from hubspot_mcp.utilities.logging import configure_logging

logger = logging.getLogger("hubspot_mcp")


@click.command()
@click.option("--host", default=None, help="Interface to bind (default: HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port to listen on for HTTP (default: PORT or 3000)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level (default: LOG_LEVEL or INFO)",
)
def main(host: str | None, port: int | None, log_level: str | None) -> int:
    try:
        settings = load_settings(host=host, port=port, log_level=log_level)
    except ConfigurationError as err:
        configure_logging()
        logger.error(f"Missing or invalid configuration: {err}")
        sys.exit(1)

    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info(f"MCP HubSpot ready on {settings.host}:{settings.port} ({settings.sse_path})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    main()
