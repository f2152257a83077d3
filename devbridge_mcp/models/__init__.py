"""Data models for devbridge MCP."""

from devbridge_mcp.models.command import (
    CommandEvent,
    CommandLogEntry,
    CommandResult,
    CommandStatus,
)
from devbridge_mcp.models.device import Device, StorageInfo
from devbridge_mcp.models.transfer import BiosFileCopy, RomFileCopy

__all__ = [
    "BiosFileCopy",
    "CommandEvent",
    "CommandLogEntry",
    "CommandResult",
    "CommandStatus",
    "Device",
    "RomFileCopy",
    "StorageInfo",
]
