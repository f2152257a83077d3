"""Services for devbridge MCP."""

from devbridge_mcp.services.audit import LoggingAuditSink, attach_audit_file
from devbridge_mcp.services.audit_log import CommandAuditLog
from devbridge_mcp.services.bridge import DeviceBridgeService, local_file_hash
from devbridge_mcp.services.runner import CommandRunner
from devbridge_mcp.services.transfer import FileTransferOrchestrator, rom_directory_name

__all__ = [
    "attach_audit_file",
    "CommandAuditLog",
    "CommandRunner",
    "DeviceBridgeService",
    "FileTransferOrchestrator",
    "local_file_hash",
    "LoggingAuditSink",
    "rom_directory_name",
]
