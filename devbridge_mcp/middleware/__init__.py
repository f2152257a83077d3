"""devbridge MCP middleware components."""

from devbridge_mcp.middleware.base import DevBridgeMiddleware
from devbridge_mcp.middleware.errors import ErrorHandlingMiddleware
from devbridge_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "DevBridgeMiddleware",
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
