"""Devices resource for listing attached devices."""

from devbridge_mcp.services.state import get_dependencies
from devbridge_mcp.tools.handlers import format_devices


async def list_devices_resource() -> str:
    """List devices attached to the device bridge with their state.

    Returns:
        Device table plus URI hints, or a note when adb is unavailable.
    """
    bridge = get_dependencies().bridge

    if not await bridge.is_available():
        return "adb is not available. Check DEVBRIDGE_ADB_PATH."

    devices = await bridge.list_devices()
    lines = [format_devices(devices)]
    if devices:
        lines.append("")
        lines.append("Use device_files(path, device_id=<id>) to browse a device.")
    return "\n".join(lines)
