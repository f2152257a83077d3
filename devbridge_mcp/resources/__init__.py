"""MCP resources for devbridge MCP."""

from devbridge_mcp.resources.commands import command_history_resource, command_viewer_resource
from devbridge_mcp.resources.devices import list_devices_resource

__all__ = [
    "command_history_resource",
    "command_viewer_resource",
    "list_devices_resource",
]
