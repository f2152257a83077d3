"""Base middleware class for devbridge MCP."""

import logging

from fastmcp.server.middleware import Middleware


class DevBridgeMiddleware(Middleware):
    """Middleware base carrying a configurable logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize middleware.

        Args:
            logger: Optional custom logger. Defaults to module logger.
        """
        self.logger = logger or logging.getLogger(__name__)
