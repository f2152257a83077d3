"""File transfer tools: single files, directories and BIOS/ROM batches."""

import logging
import os
from typing import Any

from devbridge_mcp.models import BiosFileCopy, CommandResult, RomFileCopy
from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.services.transfer import FileTransferOrchestrator
from devbridge_mcp.tools.handlers import format_result

logger = logging.getLogger(__name__)


async def device_transfer(
    action: str,
    local_path: str,
    remote_path: str,
    device_id: str | None = None,
) -> str:
    """Copy a file or directory between this machine and a device.

    Args:
        action: "push" (local file to device), "pull" (device file to local)
            or "pull_dir" (device directory to local, recursively).
        local_path: Path on this machine.
        remote_path: Path on the device.
        device_id: Serial of the target device; optional with one device.

    Examples:
        device_transfer("push", "/tmp/scph1001.bin", "/mnt/SDCARD/Bios/PS/scph1001.bin")
        device_transfer("pull_dir", "/tmp/saves", "/mnt/SDCARD/Saves")

    Returns:
        Transfer progress followed by "OK" or an error line.
    """
    bridge = get_dependencies().bridge
    progress: list[str] = []

    if action == "push":
        result = await bridge.push_file(local_path, remote_path, device_id, progress.append)
    elif action == "pull":
        result = await bridge.pull_file(remote_path, local_path, device_id, progress.append)
    elif action == "pull_dir":
        result = await bridge.pull_directory(
            remote_path, local_path, device_id, progress.append
        )
    else:
        return f"Error: Unknown action '{action}'. Use push, pull or pull_dir."

    return format_result(result, progress)


def _build(kind: type, files: list[dict[str, Any]]) -> list:
    items = []
    for index, item in enumerate(files, start=1):
        try:
            items.append(kind(**item))
        except TypeError as e:
            raise ValueError(f"Invalid entry #{index}: {e}") from e
    return items


async def _run_batch(
    orchestrator: FileTransferOrchestrator,
    copy: Any,
    items: list,
    verify: bool,
    destinations: list[str],
) -> str:
    progress: list[str] = []

    if verify:
        check = await orchestrator.verify_installation(progress.append)
        if not check.success:
            return format_result(check, progress)

    result: CommandResult = await copy(items, progress.append)
    if result.success and verify:
        missing = await orchestrator.verify_files(destinations)
        if missing:
            progress.append("Missing after transfer:")
            progress.extend(f"  {path}" for path in missing)
            result = CommandResult.failure(f"{len(missing)} file(s) missing on device")
    return format_result(result, progress)


async def copy_bios(
    files: list[dict[str, str]],
    device_id: str | None = None,
    verify: bool = False,
) -> str:
    """Copy BIOS files into the NextUI Bios folder of a device.

    Each entry needs "source_path", "file_name" and "system_code"; the file
    lands at <base>/Bios/<system_code>/<file_name>. Copying neogeo.zip for
    FBN also installs the arcade map.txt.

    Args:
        files: BIOS files to copy, in order.
        device_id: Serial of the target device; optional with one device.
        verify: Check the NextUI installation first and the copied files after.

    Returns:
        Per-file progress followed by "OK" or the first error.
    """
    try:
        items = _build(BiosFileCopy, files)
    except ValueError as e:
        return f"Error: {e}"

    orchestrator = get_dependencies().orchestrator(device_id)
    destinations = [orchestrator.bios_remote_path(i.system_code, i.file_name) for i in items]
    return await _run_batch(
        orchestrator, orchestrator.copy_bios_files, items, verify, destinations
    )


async def copy_roms(
    files: list[dict[str, str]],
    device_id: str | None = None,
    verify: bool = False,
) -> str:
    """Copy ROM files into the NextUI Roms folders of a device.

    Each entry needs "source_path", "file_name" and "system_code", plus an
    optional "system_name" used for the folder, e.g. "Sony PlayStation (PS)".

    Args:
        files: ROM files to copy, in order.
        device_id: Serial of the target device; optional with one device.
        verify: Check the NextUI installation first and the copied files after.

    Returns:
        Per-file progress followed by "OK" or the first error.
    """
    try:
        items = _build(RomFileCopy, files)
    except ValueError as e:
        return f"Error: {e}"

    orchestrator = get_dependencies().orchestrator(device_id)
    destinations = [
        orchestrator.rom_remote_path(i.system_code, i.system_name, os.path.basename(i.source_path))
        for i in items
    ]
    return await _run_batch(
        orchestrator, orchestrator.copy_rom_files, items, verify, destinations
    )
