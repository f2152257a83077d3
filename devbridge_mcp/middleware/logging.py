"""Logging middleware for request/response tracking."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from devbridge_mcp.middleware.base import DevBridgeMiddleware

# Methods with a dedicated hook below
_HANDLED_METHODS = ("tools/call", "resources/read", "tools/list", "resources/list")


class LoggingMiddleware(DevBridgeMiddleware):
    """Log MCP tool calls and resource reads with their duration.

    Requests slower than ``slow_threshold_ms`` are logged at WARNING,
    which mostly flags long device transfers.

    Example:
        >>> middleware = LoggingMiddleware(include_payloads=True)
        >>> mcp.add_middleware(middleware)
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 1000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Whether to log request/response payloads.
            max_payload_length: Maximum payload length before truncation.
            slow_threshold_ms: Threshold in ms for slow request warnings.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _truncate(self, data: Any) -> str:
        try:
            text = json.dumps(data, default=str)
        except (TypeError, ValueError):
            text = str(data)

        if len(text) > self.max_payload_length:
            return text[: self.max_payload_length] + "... [truncated]"
        return text

    def _format_args(self, args: dict[str, Any] | None) -> str:
        if not args:
            return "()"
        parts = []
        for key, value in args.items():
            if isinstance(value, str) and len(value) > 50:
                value = value[:50] + "..."
            parts.append(f"{key}={value!r}")
        return f"({', '.join(parts)})"

    def _format_duration(self, duration_ms: float) -> str:
        if duration_ms >= self.slow_threshold_ms:
            return f"{duration_ms:.1f}ms SLOW!"
        return f"{duration_ms:.1f}ms"

    async def _timed(
        self,
        label: str,
        context: MiddlewareContext,
        call_next: Any,
        summarize: Any,
        level: int = logging.INFO,
    ) -> Any:
        """Run ``call_next`` and log the ``<<<`` or ``!!!`` line for ``label``."""
        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! %s -> %s: %s [%s]",
                label,
                type(e).__name__,
                str(e),
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms >= self.slow_threshold_ms:
            level = logging.WARNING
        self.logger.log(
            level,
            "<<< %s -> %s [%s]",
            label,
            summarize(result),
            self._format_duration(duration_ms),
        )
        return result

    async def on_call_tool(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log tool calls with name, arguments, and timing."""
        tool_name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)

        self.logger.info(">>> TOOL: %s%s", tool_name, self._format_args(args))
        if self.include_payloads and args:
            self.logger.debug("    Args: %s", self._truncate(args))

        result = await self._timed(
            f"TOOL: {tool_name}", context, call_next, self._summarize_result
        )
        if self.include_payloads and result is not None:
            self.logger.debug("    Result: %s", self._truncate(result))
        return result

    async def on_read_resource(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log resource reads with URI and timing."""
        uri = getattr(context.message, "uri", "unknown")
        self.logger.info(">>> RESOURCE: %s", uri)
        return await self._timed(
            f"RESOURCE: {uri}", context, call_next, self._summarize_result
        )

    async def on_list_tools(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        self.logger.info(">>> LIST TOOLS")
        return await self._timed(
            "LIST TOOLS",
            context,
            call_next,
            lambda result: f"{_count(result, 'tools')} tool(s)",
        )

    async def on_list_resources(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        self.logger.info(">>> LIST RESOURCES")
        return await self._timed(
            "LIST RESOURCES",
            context,
            call_next,
            lambda result: f"{_count(result, 'resources')} resource(s)",
        )

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log remaining protocol messages at DEBUG."""
        method = context.method
        if method in _HANDLED_METHODS:
            return await call_next(context)

        self.logger.debug(">>> MCP: %s", method)
        return await self._timed(
            f"MCP: {method}", context, call_next, lambda _: "done", level=logging.DEBUG
        )

    def _summarize_result(self, result: Any) -> str:
        """Create a brief summary of a result for logging."""
        if result is None:
            return "null"

        if isinstance(result, str):
            lines = result.count("\n") + 1
            if lines > 1:
                return f"{len(result)} chars, {lines} lines"
            return f"{len(result)} chars"

        if isinstance(result, (list, tuple)):
            return f"{len(result)} items"

        if isinstance(result, dict):
            return f"{len(result)} keys"

        # MCP responses
        if hasattr(result, "content"):
            content = result.content
            if isinstance(content, (list, tuple)):
                return f"{len(content)} content item(s)"
            return "content"

        return type(result).__name__


def _count(result: Any, attr: str) -> int | str:
    if hasattr(result, attr):
        return len(getattr(result, attr))
    if isinstance(result, (list, tuple)):
        return len(result)
    return "?"
