"""Tests for dependency injection container."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from devbridge_mcp.config import Config
from devbridge_mcp.dependencies import Dependencies
from devbridge_mcp.models import CommandEvent, CommandStatus
from devbridge_mcp.services import CommandAuditLog, CommandRunner, DeviceBridgeService
from devbridge_mcp.services.audit import AUDIT_LOGGER_NAME
from devbridge_mcp.services.state import get_dependencies, reset_state, set_dependencies


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DEVBRIDGE_AUDIT_LOG", raising=False)
    reset_state()
    yield
    reset_state()


class TestDependencies:
    """Test Dependencies container."""

    def test_create_wires_services(self) -> None:
        deps = Dependencies.create()

        assert isinstance(deps.config, Config)
        assert isinstance(deps.runner, CommandRunner)
        assert isinstance(deps.audit_log, CommandAuditLog)
        assert isinstance(deps.bridge, DeviceBridgeService)
        assert deps.bridge.runner is deps.runner

    def test_from_config_uses_config_values(self) -> None:
        config = Config()
        config.adb_path = "/opt/adb"
        config.command_timeout_ms = 1234
        config.history_size = 7
        config.hash_timeout_ms = 42

        deps = Dependencies.from_config(config)

        assert deps.config is config
        assert deps.runner.executable == "/opt/adb"
        assert deps.runner.default_timeout_ms == 1234
        assert deps.audit_log.capacity == 7
        assert deps.bridge.hash_timeout_ms == 42

    def test_audit_log_follows_runner_until_cleanup(self) -> None:
        deps = Dependencies.from_config(Config())
        event = CommandEvent(
            command="adb version", start_time=datetime.now(), status=CommandStatus.STARTING
        )

        deps.runner._publish(event)
        assert deps.audit_log.count() == 1

        deps.cleanup()
        deps.runner._publish(event)
        assert deps.audit_log.count() == 1

    def test_orchestrator_uses_config(self) -> None:
        config = Config()
        config.device_base_path = "/mnt/other"

        orchestrator = Dependencies.from_config(config).orchestrator("abc")

        assert orchestrator.device_id == "abc"
        assert orchestrator.bios_remote_path("PS", "x.bin") == "/mnt/other/Bios/PS/x.bin"

    def test_audit_log_path_attaches_file_handler(self, tmp_path: Path) -> None:
        config = Config()
        config.audit_log_path = str(tmp_path / "audit.log")
        audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
        before = list(audit_logger.handlers)

        Dependencies.from_config(config)

        added = [h for h in audit_logger.handlers if h not in before]
        try:
            assert len(added) == 1
            assert isinstance(added[0], logging.FileHandler)
        finally:
            for handler in added:
                audit_logger.removeHandler(handler)
                handler.close()


class TestState:
    """Test the process-wide dependencies singleton."""

    def test_get_dependencies_is_cached(self) -> None:
        assert get_dependencies() is get_dependencies()

    def test_set_and_reset(self) -> None:
        deps = Dependencies.from_config(Config())
        set_dependencies(deps)
        assert get_dependencies() is deps

        reset_state()
        assert get_dependencies() is not deps
