"""Tests for the logging-backed audit sink."""

import logging
import re
from pathlib import Path

from devbridge_mcp.protocols import AuditSink
from devbridge_mcp.services.audit import LoggingAuditSink, attach_audit_file


def test_sink_satisfies_protocol() -> None:
    assert isinstance(LoggingAuditSink(), AuditSink)


def test_audit_file_lines_are_timestamped(tmp_path: Path) -> None:
    logger = logging.getLogger("devbridge_mcp.tests.audit_file")
    logger.propagate = False
    path = tmp_path / "adb_commands.log"
    handler = attach_audit_file(str(path), logger)
    try:
        sink = LoggingAuditSink(logger)
        sink.log_immediate("ADB Command Starting: adb devices -l")
        sink.log_immediate("ADB Command Success: adb devices -l (completed in 0.05s)")
    finally:
        logger.removeHandler(handler)
        handler.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert re.fullmatch(
        r"\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ADB Command Starting: adb devices -l", lines[0]
    )
    assert lines[1].endswith("(completed in 0.05s)")


def test_audit_file_appends(tmp_path: Path) -> None:
    path = tmp_path / "adb_commands.log"
    path.write_text("[2025-01-01 00:00:00] earlier\n", encoding="utf-8")
    logger = logging.getLogger("devbridge_mcp.tests.audit_append")
    logger.propagate = False
    handler = attach_audit_file(str(path), logger)
    try:
        LoggingAuditSink(logger).log_immediate("later")
    finally:
        logger.removeHandler(handler)
        handler.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "[2025-01-01 00:00:00] earlier"
    assert lines[1].endswith("] later")
