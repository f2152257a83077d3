"""Dependency injection container for devbridge MCP."""

import logging
from dataclasses import dataclass

from devbridge_mcp.config import Config
from devbridge_mcp.services.audit import LoggingAuditSink, attach_audit_file
from devbridge_mcp.services.audit_log import CommandAuditLog
from devbridge_mcp.services.bridge import DeviceBridgeService
from devbridge_mcp.services.runner import CommandRunner
from devbridge_mcp.services.transfer import FileTransferOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class Dependencies:
    """Container for devbridge MCP collaborators.

    The audit log is subscribed to the runner on creation, so every
    command run through ``bridge`` shows up in ``audit_log``.

    Example:
        deps = Dependencies.create()
        devices = await deps.bridge.list_devices()
    """

    config: Config
    runner: CommandRunner
    audit_log: CommandAuditLog
    bridge: DeviceBridgeService

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies with configuration read from the environment."""
        return cls.from_config(Config())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with a custom configuration.

        Args:
            config: Custom Config instance

        Returns:
            Dependencies wired from config
        """
        if config.audit_log_path:
            attach_audit_file(config.audit_log_path)
            logger.info("Writing command audit log to %s", config.audit_log_path)

        sink = LoggingAuditSink()
        runner = CommandRunner(
            config.adb_path,
            audit_sink=sink,
            default_timeout_ms=config.command_timeout_ms,
            kill_grace_ms=config.kill_grace_ms,
        )
        audit_log = CommandAuditLog(capacity=config.history_size)
        audit_log.attach(runner)
        bridge = DeviceBridgeService(
            runner,
            audit_sink=sink,
            device_base_path=config.device_base_path,
            directory_pull_timeout_ms=config.directory_pull_timeout_ms,
            hash_timeout_ms=config.hash_timeout_ms,
            version_timeout_ms=config.version_timeout_ms,
        )
        return cls(config=config, runner=runner, audit_log=audit_log, bridge=bridge)

    def orchestrator(self, device_id: str | None = None) -> FileTransferOrchestrator:
        """Build a batch orchestrator bound to one device."""
        return FileTransferOrchestrator(
            self.bridge,
            device_id=device_id,
            base_path=self.config.device_base_path,
            arcade_map_url=self.config.arcade_map_url,
        )

    def cleanup(self) -> None:
        """Stop recording runner events."""
        self.audit_log.detach()
