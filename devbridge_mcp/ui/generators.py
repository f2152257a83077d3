"""UI resource generators."""

from collections.abc import Sequence
from typing import Any

from mcp_ui_server import create_ui_resource

from devbridge_mcp.models import CommandLogEntry
from devbridge_mcp.ui.templates import get_command_log_html


def create_command_log_ui(
    entries: Sequence[CommandLogEntry], expanded: bool = True
) -> dict[str, Any]:
    """Create the interactive command history viewer.

    Args:
        entries: Log entries, oldest first
        expanded: Whether command details start unfolded

    Returns:
        UIResource dict
    """
    html = get_command_log_html(entries, expanded)

    ui_resource = create_ui_resource({
        "uri": "ui://devbridge/commands",
        "content": {"type": "rawHtml", "htmlString": html},
        "encoding": "text",
    })

    return ui_resource.model_dump()
