"""Entry point for the devbridge_mcp server."""

import logging

from devbridge_mcp.server import mcp  # Importing also configures logging
from devbridge_mcp.services.state import get_dependencies

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with the configured transport."""
    config = get_dependencies().config

    if config.transport == "stdio":
        logger.info("Starting devbridge MCP server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting devbridge MCP server (transport=http, host=%s, port=%d)",
            config.http_host,
            config.http_port,
        )
        mcp.run(
            transport="http",
            host=config.http_host,
            port=config.http_port,
        )


if __name__ == "__main__":
    run_server()
