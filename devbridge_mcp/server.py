"""devbridge MCP FastMCP server.

A thin wrapper that wires the MCP server to tools and resources. All
device-bridge logic lives in the services/ modules.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from devbridge_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from devbridge_mcp.resources import (
    command_history_resource,
    command_viewer_resource,
    list_devices_resource,
)
from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.tools import (
    command_log,
    copy_bios,
    copy_roms,
    device_files,
    device_transfer,
    devices,
)
from devbridge_mcp.utils.console import MCPRequestFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the devbridge_mcp package.

    Called at module load time so logging is ready however the server is
    started.
    """
    log_level = os.getenv("DEVBRIDGE_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("DEVBRIDGE_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("devbridge_mcp")
    package_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MCPRequestFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "urllib3",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        lg = logging.getLogger(noisy_logger)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Build dependencies and probe the adb executable at startup.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with adb availability and the attached device ids
    """
    logger.info("devbridge MCP server starting up")

    deps = get_dependencies()
    server.deps = deps

    available = await deps.bridge.is_available()
    device_ids: list[str] = []
    if available:
        device_ids = [d.id for d in await deps.bridge.list_devices()]
        logger.info(
            "adb ready at %s, %d device(s): %s",
            deps.config.adb_path,
            len(device_ids),
            ", ".join(device_ids) if device_ids else "(none)",
        )
    else:
        logger.warning(
            "adb not available at %s; tools will report errors until it is",
            deps.config.adb_path,
        )

    try:
        yield {"adb_available": available, "devices": device_ids}
    finally:
        logger.info("devbridge MCP server shutting down")
        deps.cleanup()
        logger.info("devbridge MCP server shutdown complete")


def configure_middleware(server: FastMCP) -> None:
    """Configure the middleware stack: ErrorHandling -> Logging.

    Environment variables:
        DEVBRIDGE_LOG_PAYLOADS: "true" to log request/response payloads
        DEVBRIDGE_SLOW_THRESHOLD_MS: Slow request warning threshold (default: 5000)
        DEVBRIDGE_INCLUDE_TRACEBACK: "true" to include tracebacks in error logs

    Args:
        server: The FastMCP server to configure.
    """
    log_payloads = os.getenv("DEVBRIDGE_LOG_PAYLOADS", "").lower() == "true"
    slow_threshold = float(os.getenv("DEVBRIDGE_SLOW_THRESHOLD_MS", "5000"))
    include_traceback = os.getenv("DEVBRIDGE_INCLUDE_TRACEBACK", "").lower() == "true"

    # First added = innermost
    server.add_middleware(ErrorHandlingMiddleware(include_traceback=include_traceback))
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=log_payloads,
            slow_threshold_ms=slow_threshold,
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with middleware, tools and resources.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP(
        "devbridge_mcp",
        lifespan=app_lifespan,
    )

    configure_middleware(server)

    server.tool()(devices)
    server.tool()(device_files)
    server.tool()(device_transfer)
    server.tool()(copy_bios)
    server.tool()(copy_roms)
    server.tool()(command_log)

    server.resource("devices://list")(list_devices_resource)
    server.resource("commands://history")(command_history_resource)
    server.resource("commands://viewer", mime_type="text/html")(command_viewer_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
