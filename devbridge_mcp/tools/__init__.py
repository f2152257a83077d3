"""MCP tools for devbridge MCP."""

from devbridge_mcp.tools.command_log import command_log
from devbridge_mcp.tools.devices import device_files, devices
from devbridge_mcp.tools.transfer import copy_bios, copy_roms, device_transfer

__all__ = [
    "command_log",
    "copy_bios",
    "copy_roms",
    "device_files",
    "device_transfer",
    "devices",
]
