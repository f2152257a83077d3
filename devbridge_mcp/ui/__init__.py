"""UI resource generators for devbridge MCP."""

from devbridge_mcp.ui.generators import create_command_log_ui

__all__ = ["create_command_log_ui"]
