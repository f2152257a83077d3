"""Utilities for devbridge MCP."""

from devbridge_mcp.utils.console import ColorfulFormatter, MCPRequestFormatter
from devbridge_mcp.utils.parser import (
    is_missing_path_output,
    parse_devices_output,
    parse_df_output,
    parse_hash_output,
    parse_listing,
    strip_ansi,
)
from devbridge_mcp.utils.shell import escape_shell_arg

__all__ = [
    "ColorfulFormatter",
    "escape_shell_arg",
    "is_missing_path_output",
    "MCPRequestFormatter",
    "parse_devices_output",
    "parse_df_output",
    "parse_hash_output",
    "parse_listing",
    "strip_ansi",
]
