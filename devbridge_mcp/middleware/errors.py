"""Error logging for MCP requests that escape the device tools."""

import logging
import traceback
from collections import Counter
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from devbridge_mcp.middleware.base import DevBridgeMiddleware


def describe_target(context: MiddlewareContext) -> str:
    """Name what a request was aimed at, e.g. ``copy_bios@ABC123``.

    Tool calls give the tool name plus the ``device_id`` argument when one
    was passed; resource reads give the URI.
    """
    message = context.message
    if uri := getattr(message, "uri", None):
        return str(uri)
    name = getattr(message, "name", None)
    if not isinstance(name, str):
        return context.method or "unknown"
    arguments = getattr(message, "arguments", None)
    device_id = arguments.get("device_id") if isinstance(arguments, dict) else None
    return f"{name}@{device_id}" if device_id else name


class ErrorHandlingMiddleware(DevBridgeMiddleware):
    """Log every failed MCP request, count failures per target and re-raise.

    Device-bridge failures normally come back as error strings from the
    tools; anything reaching this layer is a bug or a protocol problem.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._failures: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Failures keyed by ``<target>: <exception type>``."""
        return dict(self._failures)

    def reset_stats(self) -> None:
        self._failures.clear()

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        try:
            return await call_next(context)
        except Exception as e:
            target = describe_target(context)
            error_type = type(e).__name__
            self._failures[f"{target}: {error_type}"] += 1

            message = f"{context.method} {target} failed: {error_type}: {e}"
            if self.include_traceback:
                message = f"{message}\n{traceback.format_exc()}"
            self.logger.error(message)
            raise
