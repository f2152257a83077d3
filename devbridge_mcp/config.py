"""Configuration management for devbridge MCP."""

import logging
import os
from contextlib import suppress
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Upper bound on retained command-log entries
MAX_HISTORY_SIZE = 50

DEFAULT_ARCADE_MAP_URL = (
    "https://raw.githubusercontent.com/ryanmsartor/"
    "TrimUI-Brick-and-Smart-Pro-Custom-MinUI-Paks/refs/heads/main/"
    "Roms/Arcade%20(FBN)/map.txt"
)


def _get_env_int(key: str) -> int | None:
    """Read an integer environment variable, ignoring unparsable values."""
    if val := os.getenv(key):
        with suppress(ValueError):
            return int(val)
        logger.warning("Ignoring non-integer %s=%r", key, val)
    return None


@dataclass
class Config:
    """devbridge MCP configuration.

    ``adb_path`` is used as given; resolving a platform-specific
    executable location is up to whoever sets it.
    """

    adb_path: str = "adb"
    command_timeout_ms: int = 30_000
    directory_pull_timeout_ms: int = 120_000
    hash_timeout_ms: int = 10_000
    version_timeout_ms: int = 5_000
    kill_grace_ms: int = 1_000
    history_size: int = MAX_HISTORY_SIZE
    device_base_path: str = "/mnt/SDCARD"
    arcade_map_url: str = DEFAULT_ARCADE_MAP_URL
    audit_log_path: str | None = None
    # Transport configuration
    transport: str = "http"  # "http" or "stdio"
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    def __post_init__(self) -> None:
        """Apply DEVBRIDGE_* environment variable overrides."""
        if adb_path := os.getenv("DEVBRIDGE_ADB_PATH", "").strip():
            self.adb_path = adb_path

        for key, attr in (
            ("DEVBRIDGE_COMMAND_TIMEOUT_MS", "command_timeout_ms"),
            ("DEVBRIDGE_DIRECTORY_PULL_TIMEOUT_MS", "directory_pull_timeout_ms"),
            ("DEVBRIDGE_HASH_TIMEOUT_MS", "hash_timeout_ms"),
            ("DEVBRIDGE_VERSION_TIMEOUT_MS", "version_timeout_ms"),
            ("DEVBRIDGE_KILL_GRACE_MS", "kill_grace_ms"),
        ):
            val = _get_env_int(key)
            if val is not None:
                setattr(self, attr, val)

        val = _get_env_int("DEVBRIDGE_HISTORY_SIZE")
        if val is not None:
            if not 0 < val <= MAX_HISTORY_SIZE:
                logger.warning(
                    "DEVBRIDGE_HISTORY_SIZE must be between 1 and %d, got %d. Using default: %d",
                    MAX_HISTORY_SIZE,
                    val,
                    self.history_size,
                )
            else:
                self.history_size = val

        if base_path := os.getenv("DEVBRIDGE_BASE_PATH", "").strip():
            self.device_base_path = base_path.rstrip("/") or "/"

        if map_url := os.getenv("DEVBRIDGE_ARCADE_MAP_URL", "").strip():
            self.arcade_map_url = map_url

        if audit_log := os.getenv("DEVBRIDGE_AUDIT_LOG", "").strip():
            self.audit_log_path = os.path.expanduser(audit_log)

        # Transport configuration
        transport = os.getenv("DEVBRIDGE_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            self.transport = transport

        if http_host := os.getenv("DEVBRIDGE_HTTP_HOST"):
            self.http_host = http_host

        http_port = _get_env_int("DEVBRIDGE_HTTP_PORT")
        if http_port is not None:
            self.http_port = http_port

        logger.debug(
            "Config initialized: adb_path=%s, transport=%s, command_timeout_ms=%d, "
            "history_size=%d, device_base_path=%s",
            self.adb_path,
            self.transport,
            self.command_timeout_ms,
            self.history_size,
            self.device_base_path,
        )
