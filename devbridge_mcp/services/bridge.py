"""Device-bridge operations built on top of the command runner.

Every public coroutine catches its own failures and returns an empty,
false or None value (or a failed CommandResult) instead of raising, so
callers inspect results rather than catching exceptions.
"""

import asyncio
import hashlib
import logging
import os
import tempfile
import uuid
from collections.abc import Sequence

from devbridge_mcp.models import CommandResult, Device, StorageInfo
from devbridge_mcp.protocols import AuditSink, CommandExecutor, ProgressSink
from devbridge_mcp.services.audit import LoggingAuditSink
from devbridge_mcp.utils.parser import (
    HASH_HEX_LENGTHS,
    is_missing_path_output,
    parse_devices_output,
    parse_df_output,
    parse_hash_output,
    parse_listing,
)
from devbridge_mcp.utils.shell import escape_shell_arg

logger = logging.getLogger(__name__)

VERSION_BANNER = "Android Debug Bridge"
EXISTS_SENTINEL = "EXISTS"
MISSING_SENTINEL = "NOT_EXISTS"
HASH_TEMP_PREFIX = "bios_hash_check_"
_HASH_CHUNK = 64 * 1024


def _hash_file(path: str, algorithm: str) -> str:
    digest = hashlib.new(algorithm)
    with open(path, "rb") as f:
        while chunk := f.read(_HASH_CHUNK):
            digest.update(chunk)
    return digest.hexdigest()


async def local_file_hash(
    path: str,
    algorithm: str = "md5",
    audit_sink: AuditSink | None = None,
) -> str | None:
    """Hash a local file in a worker thread.

    Args:
        path: Local file path
        algorithm: One of md5, sha1, sha256
        audit_sink: Where read failures are reported

    Returns:
        Lower-case hex digest, or None if the file is missing or unreadable
    """
    if not os.path.isfile(path):
        return None
    try:
        return await asyncio.to_thread(_hash_file, path, algorithm)
    except (OSError, ValueError) as e:
        message = f"Failed to compute {algorithm.upper()} hash for '{path}': {e}"
        logger.warning(message)
        if audit_sink is not None:
            audit_sink.log_immediate(message)
        return None


def _check_algorithm(algorithm: str) -> str:
    algorithm = algorithm.lower()
    if algorithm not in HASH_HEX_LENGTHS:
        raise ValueError(
            f"Unsupported hash algorithm {algorithm!r}; "
            f"expected one of {', '.join(sorted(HASH_HEX_LENGTHS))}"
        )
    return algorithm


def _report(progress: ProgressSink | None, message: str) -> None:
    if progress is not None:
        progress(message)


class DeviceBridgeService:
    """Stateless facade over device-bridge commands.

    Holds no per-device state, so concurrent calls for different devices
    are independent. Calls for the same device are not serialized here.
    """

    def __init__(
        self,
        runner: CommandExecutor,
        audit_sink: AuditSink | None = None,
        device_base_path: str = "/mnt/SDCARD",
        directory_pull_timeout_ms: int = 120_000,
        hash_timeout_ms: int = 10_000,
        version_timeout_ms: int = 5_000,
    ) -> None:
        """Initialize the service.

        Args:
            runner: Executes device-bridge commands
            audit_sink: Receives recoverable-error lines
            device_base_path: Storage mount probed by storage_info()
            directory_pull_timeout_ms: Deadline for pull_directory()
            hash_timeout_ms: Deadline for the on-device hash attempt
            version_timeout_ms: Deadline for is_available()
        """
        self.runner = runner
        self.audit_sink: AuditSink = audit_sink or LoggingAuditSink()
        self.device_base_path = device_base_path
        self.directory_pull_timeout_ms = directory_pull_timeout_ms
        self.hash_timeout_ms = hash_timeout_ms
        self.version_timeout_ms = version_timeout_ms

    @staticmethod
    def _args(device_id: str | None, *args: str) -> list[str]:
        """Prefix ``-s <device_id>`` when a device is selected."""
        selector = ["-s", device_id] if device_id else []
        return [*selector, *args]

    def _log_error(self, message: str) -> None:
        logger.warning(message)
        self.audit_sink.log_immediate(message)

    # -------- Discovery --------

    async def is_available(self) -> bool:
        """Check that the executable runs and reports an adb version banner."""
        try:
            result = await self.runner.run(["version"], timeout_ms=self.version_timeout_ms)
            return result.success and VERSION_BANNER in result.output
        except Exception as e:
            self._log_error(f"ADB availability check failed: {e}")
            return False

    async def list_devices(self) -> list[Device]:
        """List attached devices in ``adb devices -l`` order."""
        try:
            result = await self.runner.run(["devices", "-l"])
            if not result.success:
                return []
            return parse_devices_output(result.output)
        except Exception as e:
            self._log_error(f"Failed to get ADB devices: {e}")
            return []

    # -------- Remote file-system queries --------

    async def path_exists(self, remote_path: str, device_id: str | None = None) -> bool:
        """Check whether a file or directory exists on the device."""
        try:
            probe = (
                f"test -e {escape_shell_arg(remote_path)} "
                f"&& echo {EXISTS_SENTINEL} || echo {MISSING_SENTINEL}"
            )
            result = await self.runner.run(self._args(device_id, "shell", probe))
            if not result.success or not result.output:
                return False
            return result.output.splitlines()[-1].strip() == EXISTS_SENTINEL
        except Exception as e:
            self._log_error(f"PathExists check failed for '{remote_path}': {e}")
            return False

    async def list_files(
        self,
        remote_path: str,
        device_id: str | None = None,
        directories_only: bool = False,
    ) -> list[str]:
        """List entry names in a device directory.

        Args:
            remote_path: Directory on the device
            device_id: Optional device selector
            directories_only: Only return sub-directories

        Returns:
            Names in listing order; empty if the directory is missing
        """
        try:
            list_command = "ls -1 -d --color=never */" if directories_only else "ls -1 --color=never"
            shell_command = f"cd {escape_shell_arg(remote_path)} && {list_command}"
            result = await self.runner.run(self._args(device_id, "shell", shell_command))

            if is_missing_path_output(f"{result.output} {result.error or ''}"):
                return []
            if not result.success or not result.output:
                return []
            return parse_listing(result.output)
        except Exception as e:
            self._log_error(f"Failed to list files in '{remote_path}': {e}")
            return []

    async def storage_info(
        self,
        device_id: str | None = None,
        mount_path: str | None = None,
    ) -> StorageInfo | None:
        """Report total/used/available bytes of the storage mount."""
        mount = mount_path or self.device_base_path
        try:
            result = await self.runner.run(
                self._args(device_id, "shell", f"df {escape_shell_arg(mount)}")
            )
            if not result.success:
                return None
            info = parse_df_output(result.output, mount)
            if info is None:
                logger.info("Unrecognised df report for %s: %r", mount, result.output)
            return info
        except Exception as e:
            self._log_error(f"Failed to get storage info: {e}")
            return None

    # -------- Transfers --------

    async def push_file(
        self,
        local_path: str,
        remote_path: str,
        device_id: str | None = None,
        progress: ProgressSink | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CommandResult:
        """Push a local file to the device."""
        try:
            if not os.path.isfile(local_path):
                return CommandResult.failure(f"Local file not found: {local_path}")

            file_name = os.path.basename(local_path)
            _report(progress, f"Pushing {file_name} to device...")

            result = await self.runner.run(
                self._args(device_id, "push", local_path, remote_path),
                cancel_event=cancel_event,
                progress=progress,
            )
            if result.success:
                _report(progress, f"Successfully pushed {file_name}")
            else:
                _report(progress, f"Failed to push {file_name}: {result.error}")
            return result
        except Exception as e:
            return CommandResult.failure(str(e))

    async def pull_file(
        self,
        remote_path: str,
        local_path: str,
        device_id: str | None = None,
        progress: ProgressSink | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CommandResult:
        """Pull a single file from the device."""
        try:
            file_name = remote_path.rstrip("/").rsplit("/", 1)[-1]
            _report(progress, f"Pulling {file_name} from device...")

            parent = os.path.dirname(local_path)
            if parent:
                os.makedirs(parent, exist_ok=True)

            result = await self.runner.run(
                self._args(device_id, "pull", remote_path, local_path),
                cancel_event=cancel_event,
                progress=progress,
            )
            if result.success:
                _report(progress, f"Successfully pulled {file_name}")
            else:
                _report(progress, f"Failed to pull {file_name}: {result.error}")
            return result
        except Exception as e:
            return CommandResult.failure(str(e))

    async def pull_directory(
        self,
        remote_path: str,
        local_path: str,
        device_id: str | None = None,
        progress: ProgressSink | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CommandResult:
        """Recursively pull a device directory, creating ``local_path`` first."""
        try:
            os.makedirs(local_path, exist_ok=True)
            _report(progress, f"Pulling directory {remote_path}...")

            result = await self.runner.run(
                self._args(device_id, "pull", remote_path, local_path),
                timeout_ms=self.directory_pull_timeout_ms,
                cancel_event=cancel_event,
                progress=progress,
            )
            if result.success:
                _report(progress, f"Successfully pulled directory {remote_path}")
            else:
                _report(progress, f"Failed to pull directory: {result.error}")
            return result
        except Exception as e:
            return CommandResult.failure(str(e))

    # -------- Hashing --------

    async def remote_file_hash(
        self,
        remote_path: str,
        device_id: str | None = None,
        algorithm: str = "md5",
        on_device: bool = True,
    ) -> str | None:
        """Hash a file on the device.

        Tries ``<algorithm>sum`` on the device first and only trusts a
        correctly sized lower-case hex token. Any failure falls back to
        pulling the file into a temporary path and hashing it locally.

        Args:
            remote_path: File on the device
            device_id: Optional device selector
            algorithm: md5, sha1 or sha256
            on_device: Set False to always hash a pulled copy

        Returns:
            Hex digest, or None if both strategies failed

        Raises:
            ValueError: If the algorithm is not supported
        """
        algorithm = _check_algorithm(algorithm)

        if on_device:
            try:
                result = await self.runner.run(
                    self._args(
                        device_id, "shell", f"{algorithm}sum {escape_shell_arg(remote_path)}"
                    ),
                    timeout_ms=self.hash_timeout_ms,
                )
                if result.success:
                    digest = parse_hash_output(result.output, algorithm)
                    if digest is not None:
                        return digest
                logger.info(
                    "Device-side %s unavailable for %s, pulling instead", algorithm, remote_path
                )
            except Exception as e:
                self._log_error(
                    f"Device-side {algorithm.upper()} calculation failed for '{remote_path}', "
                    f"falling back to pull method: {e}"
                )

        return await self._hash_by_pull(remote_path, device_id, algorithm)

    async def _hash_by_pull(
        self, remote_path: str, device_id: str | None, algorithm: str
    ) -> str | None:
        temp_path = os.path.join(
            tempfile.gettempdir(), f"{HASH_TEMP_PREFIX}{uuid.uuid4().hex}.tmp"
        )
        try:
            result = await self.runner.run(
                self._args(device_id, "pull", remote_path, temp_path)
            )
            if result.success and os.path.exists(temp_path):
                return await local_file_hash(temp_path, algorithm, self.audit_sink)
            return None
        except Exception as e:
            self._log_error(
                f"Failed to pull file for {algorithm.upper()} hash calculation "
                f"'{remote_path}': {e}"
            )
            return None
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e:
                    self._log_error(f"Failed to delete temporary file '{temp_path}': {e}")

    async def verify_paths(
        self, remote_paths: Sequence[str], device_id: str | None = None
    ) -> list[str]:
        """Return the subset of ``remote_paths`` missing on the device."""
        missing = []
        for remote_path in remote_paths:
            if not await self.path_exists(remote_path, device_id):
                missing.append(remote_path)
        return missing
