"""Command history tool."""

from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.tools.handlers import format_history


async def command_log(action: str = "history", limit: int = 0) -> str:
    """Read or control the device-bridge command history.

    Args:
        action: "history", "clear", "show", "hide", "toggle", "expand"
            or "collapse".
        limit: For "history", only show the newest N commands (0 = all).

    Returns:
        History text or the new display state.
    """
    audit_log = get_dependencies().audit_log

    if action == "history":
        entries = audit_log.history()
        if limit > 0:
            entries = entries[-limit:]
        return format_history(entries)

    if action == "clear":
        audit_log.clear()
        return "Command history cleared."

    toggles = {
        "show": audit_log.show,
        "hide": audit_log.hide,
        "toggle": audit_log.toggle_visibility,
        "expand": audit_log.expand,
        "collapse": audit_log.collapse,
    }
    if action not in toggles:
        return (
            f"Error: Unknown action '{action}'. "
            "Use history, clear, show, hide, toggle, expand or collapse."
        )
    toggles[action]()
    return (
        f"Command log {'visible' if audit_log.is_visible else 'hidden'}, "
        f"{'expanded' if audit_log.is_expanded else 'collapsed'}."
    )
