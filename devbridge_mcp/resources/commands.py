"""Command history resources."""

from typing import Any

from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.tools.handlers import format_history
from devbridge_mcp.ui import create_command_log_ui


async def command_history_resource() -> str:
    """Recent device-bridge commands as plain text, oldest first."""
    return format_history(get_dependencies().audit_log.history())


async def command_viewer_resource() -> dict[str, Any]:
    """Recent device-bridge commands as an interactive HTML viewer."""
    audit_log = get_dependencies().audit_log
    return create_command_log_ui(audit_log.history(), expanded=audit_log.is_expanded)
