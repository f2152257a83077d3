"""Batch BIOS/ROM transfers onto a NextUI device.

Design:
- Items are pushed one at a time in input order.
- Cancellation is checked before each item; files already pushed stay on
  the device.
- The first failed push stops the batch and its result is returned.
- After ``neogeo.zip`` for ``FBN`` an arcade ``map.txt`` is generated and
  pushed next to it. Problems there are only reported as progress.
"""

import asyncio
import logging
import os
import posixpath
import tempfile
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import requests

from devbridge_mcp.config import DEFAULT_ARCADE_MAP_URL
from devbridge_mcp.models import BiosFileCopy, CommandResult, RomFileCopy
from devbridge_mcp.protocols import ProgressSink
from devbridge_mcp.services.bridge import DeviceBridgeService

logger = logging.getLogger(__name__)

CANCELLED_ERROR = "Transfer cancelled by user"

ARCADE_SYSTEM_CODE = "FBN"
ARCADE_BIOS_FILE = "neogeo.zip"
ARCADE_MAP_FILE = "map.txt"
# Leading "." hides the BIOS from the ROM list
ARCADE_MAP_FALLBACK = "neogeo.zip\t.Neo Geo Bios\n"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# ROM folders whose display name differs from the catalogue name
ROM_DIRECTORY_OVERRIDES = {
    "FC": "Nintendo Entertainment System",
    "MD": "Sega Genesis",
}

T = TypeVar("T", BiosFileCopy, RomFileCopy)


def _report(progress: ProgressSink | None, message: str) -> None:
    if progress is not None:
        progress(message)


def rom_directory_name(system_code: str, system_name: str = "") -> str:
    """Folder name under ``Roms/``, e.g. ``Sega Genesis (MD)``."""
    name = ROM_DIRECTORY_OVERRIDES.get(system_code) or system_name or system_code
    return f"{name} ({system_code})"


class FileTransferOrchestrator:
    """Copy BIOS and ROM sets to one device through DeviceBridgeService."""

    def __init__(
        self,
        bridge: DeviceBridgeService,
        device_id: str | None = None,
        base_path: str = "/mnt/SDCARD",
        arcade_map_url: str = DEFAULT_ARCADE_MAP_URL,
        http_timeout: float = 15.0,
    ) -> None:
        self.bridge = bridge
        self.device_id = device_id
        self.base_path = base_path.rstrip("/") or "/"
        self.arcade_map_url = arcade_map_url
        self.http_timeout = http_timeout

    # -------- Destination naming --------

    def bios_remote_path(self, system_code: str, file_name: str) -> str:
        return posixpath.join(self.base_path, "Bios", system_code, file_name)

    def rom_remote_path(self, system_code: str, system_name: str, file_name: str) -> str:
        return posixpath.join(
            self.base_path, "Roms", rom_directory_name(system_code, system_name), file_name
        )

    # -------- Verification --------

    async def verify_installation(self, progress: ProgressSink | None = None) -> CommandResult:
        """Check that NextUI is installed under the base path.

        Requires the base, ``Bios`` and ``Roms`` directories plus either
        ``MinUI.zip`` or ``.system/version.txt``.
        """
        try:
            _report(progress, "Verifying NextUI directories on device...")

            if not await self.bridge.path_exists(self.base_path, self.device_id):
                return CommandResult.failure(
                    f"NextUI installation not found at {self.base_path}. "
                    "Please ensure NextUI is properly installed on your device."
                )

            for folder, label in (("Bios", "BIOS"), ("Roms", "ROMs")):
                path = posixpath.join(self.base_path, folder)
                if not await self.bridge.path_exists(path, self.device_id):
                    return CommandResult.failure(
                        f"{label} directory not found "
                        f"at {path}. Please ensure NextUI is properly installed."
                    )

            _report(progress, "Verifying NextUI version file...")
            markers = (
                posixpath.join(self.base_path, "MinUI.zip"),
                posixpath.join(self.base_path, ".system", "version.txt"),
            )
            for marker in markers:
                if await self.bridge.path_exists(marker, self.device_id):
                    break
            else:
                return CommandResult.failure(
                    "NextUI version file not found. "
                    "Please ensure NextUI is properly installed on your device."
                )

            _report(progress, "NextUI installation verified successfully!")
            return CommandResult(success=True, output="NextUI installation verified")
        except Exception as e:
            logger.exception("Installation check failed")
            return CommandResult.failure(str(e))

    async def verify_files(self, remote_paths: Sequence[str]) -> list[str]:
        """Return the remote paths that are missing on the device."""
        return await self.bridge.verify_paths(remote_paths, self.device_id)

    # -------- Batch copies --------

    async def copy_bios_files(
        self,
        files: Sequence[BiosFileCopy],
        progress: ProgressSink | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CommandResult:
        """Push BIOS files to ``Bios/<system_code>/<file_name>``."""

        async def after_copy(item: BiosFileCopy) -> None:
            if item.file_name == ARCADE_BIOS_FILE and item.system_code == ARCADE_SYSTEM_CODE:
                await self.create_arcade_map(item.system_code, progress)

        return await self._copy_batch(
            "BIOS",
            files,
            lambda item: self.bios_remote_path(item.system_code, item.file_name),
            progress,
            cancel_event,
            after_copy,
        )

    async def copy_rom_files(
        self,
        files: Sequence[RomFileCopy],
        progress: ProgressSink | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CommandResult:
        """Push ROM files to ``Roms/<system folder>/<source file name>``."""
        return await self._copy_batch(
            "ROM",
            files,
            lambda item: self.rom_remote_path(
                item.system_code, item.system_name, os.path.basename(item.source_path)
            ),
            progress,
            cancel_event,
        )

    async def _copy_batch(
        self,
        kind: str,
        items: Sequence[T],
        destination: Callable[[T], str],
        progress: ProgressSink | None,
        cancel_event: asyncio.Event | None,
        after_copy: Callable[[T], Awaitable[None]] | None = None,
    ) -> CommandResult:
        try:
            total = len(items)
            _report(progress, f"Starting {kind} file transfer to device ({total} files)...")

            for index, item in enumerate(items, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("%s transfer cancelled after %d/%d files", kind, index - 1, total)
                    return CommandResult.failure(CANCELLED_ERROR)

                file_name = os.path.basename(item.source_path)
                _report(progress, f"Copying {file_name} ({index}/{total})...")

                def item_progress(message: str, name: str = file_name) -> None:
                    _report(progress, f"{name}: {message}")

                result = await self.bridge.push_file(
                    item.source_path,
                    destination(item),
                    self.device_id,
                    progress=item_progress,
                    cancel_event=cancel_event,
                )
                if not result.success:
                    _report(progress, f"Failed to copy {file_name}: {result.error}")
                    return result

                if after_copy is not None:
                    await after_copy(item)

            _report(progress, f"Successfully transferred {total} {kind} file(s) to device!")
            return CommandResult(success=True, output=f"Transferred {total} files")
        except Exception as e:
            logger.exception("%s transfer failed", kind)
            return CommandResult.failure(str(e))

    # -------- Arcade map --------

    def _fetch_arcade_map(self) -> str:
        response = requests.get(
            self.arcade_map_url,
            headers={"User-Agent": USER_AGENT},
            timeout=self.http_timeout,
        )
        response.raise_for_status()
        return response.text.replace("neogeo.zip\tNeo Geo Bios", "neogeo.zip\t.Neo Geo Bios")

    async def create_arcade_map(
        self, system_code: str = ARCADE_SYSTEM_CODE, progress: ProgressSink | None = None
    ) -> None:
        """Write ``map.txt`` (``file<TAB>display name`` rows) and push it.

        Downloads the full map when possible, otherwise uses a one-line map
        that hides the Neo Geo BIOS. Never raises.
        """
        temp_path: str | None = None
        try:
            _report(progress, "Creating arcade map.txt file...")
            content = ARCADE_MAP_FALLBACK
            try:
                content = await asyncio.to_thread(self._fetch_arcade_map)
                _report(progress, "Downloaded full arcade map.txt")
            except requests.HTTPError as e:
                logger.info("Arcade map download failed: %s", e)
                _report(progress, "Using basic map.txt (full download failed)")
            except requests.RequestException as e:
                logger.info("Arcade map download failed: %s", e)
                _report(progress, "Using basic map.txt (network error)")

            fd, temp_path = tempfile.mkstemp(prefix="arcade_map_", suffix=".txt")
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)

            result = await self.bridge.push_file(
                temp_path,
                self.bios_remote_path(system_code, ARCADE_MAP_FILE),
                self.device_id,
            )
            if result.success:
                _report(progress, "Arcade map.txt created successfully")
            else:
                _report(progress, f"Failed to create map.txt: {result.error}")
        except Exception as e:
            logger.warning("Error creating arcade map: %s", e)
            _report(progress, f"Error creating map.txt: {e}")
        finally:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e:
                    logger.warning("Failed to delete temporary file '%s': %s", temp_path, e)
