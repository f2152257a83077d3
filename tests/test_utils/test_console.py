"""Tests for the console log formatters."""

import logging

from devbridge_mcp.utils.console import COLORS, ColorfulFormatter, MCPRequestFormatter


def make_record(name: str, message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_plain_format_shortens_component() -> None:
    formatter = ColorfulFormatter(use_colors=False)

    line = formatter.format(make_record("devbridge_mcp.services.runner", "hello"))

    parts = [p.strip() for p in line.split("|")]
    assert parts[1] == "INFO"
    assert parts[2] == "services.runner"
    assert parts[3] == "hello"
    assert "\033[" not in line


def test_colors_highlight_adb_commands() -> None:
    formatter = ColorfulFormatter(use_colors=True)

    line = formatter.format(make_record("devbridge_mcp.audit", "ADB Command Starting: adb -s abc push"))

    assert f"{COLORS['bright_cyan']}adb -s abc push{COLORS['reset']}" in line


def test_request_formatter_marks_failures() -> None:
    formatter = MCPRequestFormatter(use_colors=True)

    line = formatter.format(make_record("devbridge_mcp.audit", "ADB Command Failed: adb pull"))

    assert line.startswith(f"{COLORS['bright_red']}!!")


def test_request_formatter_without_colors_is_unmarked() -> None:
    formatter = MCPRequestFormatter(use_colors=False)
    record = make_record("devbridge_mcp.server", "devbridge MCP server starting up")

    assert formatter.format(record) == ColorfulFormatter(use_colors=False).format(record)
