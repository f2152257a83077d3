"""Device discovery and remote file-system tools."""

import logging

from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.tools.handlers import format_devices, format_storage

logger = logging.getLogger(__name__)


async def devices(check_available: bool = False) -> str:
    """List devices attached to the device bridge.

    Args:
        check_available: Also report whether the adb executable responds.

    Examples:
        devices() - List attached devices
        devices(check_available=True) - Verify adb first, then list

    Returns:
        Device table, one block per device.
    """
    bridge = get_dependencies().bridge

    lines = []
    if check_available:
        if not await bridge.is_available():
            return "Error: adb is not available. Check DEVBRIDGE_ADB_PATH."
        lines.append("adb is available.\n")

    lines.append(format_devices(await bridge.list_devices()))
    return "\n".join(lines)


async def device_files(
    path: str = "",
    action: str = "list",
    device_id: str | None = None,
    directories_only: bool = False,
    algorithm: str = "md5",
    on_device: bool = True,
) -> str:
    """Inspect the file system of a device.

    Args:
        path: Remote path (defaults to the storage base path).
        action: One of "list", "exists", "storage", "hash".
        device_id: Serial of the target device; optional with one device.
        directories_only: For "list", return only sub-directories.
        algorithm: For "hash", one of md5, sha1, sha256.
        on_device: For "hash", set False to hash a pulled copy locally.

    Examples:
        device_files("/mnt/SDCARD/Roms", directories_only=True)
        device_files("/mnt/SDCARD/Bios/PS/scph1001.bin", action="hash")
        device_files(action="storage")

    Returns:
        Plain text answer, or a line starting with "Error:".
    """
    deps = get_dependencies()
    bridge = deps.bridge
    path = path or deps.config.device_base_path

    if action == "list":
        names = await bridge.list_files(path, device_id, directories_only=directories_only)
        if not names:
            return f"No entries found in {path}"
        return "\n".join(names)

    if action == "exists":
        exists = await bridge.path_exists(path, device_id)
        return f"{path}: {'exists' if exists else 'not found'}"

    if action == "storage":
        info = await bridge.storage_info(device_id, mount_path=path)
        if info is None:
            return f"Error: Could not read storage information for {path}"
        return format_storage(path, info)

    if action == "hash":
        try:
            digest = await bridge.remote_file_hash(
                path, device_id, algorithm=algorithm, on_device=on_device
            )
        except ValueError as e:
            return f"Error: {e}"
        if digest is None:
            return f"Error: Could not compute {algorithm} hash for {path}"
        return f"{digest}  {path}"

    return f"Error: Unknown action '{action}'. Use list, exists, storage or hash."
