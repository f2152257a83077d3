"""Tests for UI resource generators."""

from datetime import datetime, timedelta

from devbridge_mcp.models import CommandLogEntry, CommandStatus
from devbridge_mcp.ui.generators import create_command_log_ui
from devbridge_mcp.ui.templates import get_command_log_html, minify_html


def entry(command: str, status: CommandStatus, **kwargs) -> CommandLogEntry:
    return CommandLogEntry(
        command=command, start_time=datetime(2025, 1, 1, 10, 0, 0), status=status, **kwargs
    )


def test_create_command_log_ui() -> None:
    result = create_command_log_ui(
        [entry("adb version", CommandStatus.SUCCESS, execution_time=timedelta(seconds=0.1))]
    )

    assert result["type"] == "resource"
    assert str(result["resource"]["uri"]).startswith("ui://")
    assert result["resource"]["mimeType"] == "text/html"
    assert "adb version" in result["resource"]["text"]
    assert "(0.10s)" in result["resource"]["text"]


def test_newest_command_first() -> None:
    page = get_command_log_html(
        [entry("adb first", CommandStatus.SUCCESS), entry("adb second", CommandStatus.FAILED)]
    )
    assert page.index("adb second") < page.index("adb first")


def test_empty_history() -> None:
    assert "No commands recorded" in get_command_log_html([])


def test_collapsed_details_are_hidden() -> None:
    page = get_command_log_html(
        [entry("adb pull x", CommandStatus.FAILED, error="remote object does not exist")],
        expanded=False,
    )
    assert 'class="details hidden"' in page


def test_minify_html_removes_comments_and_gaps() -> None:
    assert minify_html("<div>\n  <!-- note -->\n  <span>x</span>\n</div>") == "<div><span>x</span></div>"
