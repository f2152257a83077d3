"""Text rendering shared by the devbridge tools and resources."""

from collections.abc import Sequence

from devbridge_mcp.models import CommandLogEntry, CommandResult, Device, StorageInfo


def format_result(result: CommandResult, progress: Sequence[str] = ()) -> str:
    """Render a CommandResult, preceded by any collected progress lines."""
    lines = list(progress)
    if result.success:
        if result.output:
            lines.append(result.output)
        lines.append("OK")
    else:
        lines.append(f"Error: {result.error or 'command failed'}")
        if result.returncode is not None:
            lines.append(f"Exit code: {result.returncode}")
    return "\n".join(lines)


def format_devices(devices: Sequence[Device]) -> str:
    """Render the device table shown by the devices tool and resource."""
    if not devices:
        return "No devices attached."

    lines = ["Attached Devices", "=" * 40, ""]
    for device in devices:
        icon = "✓" if device.is_online else "✗"
        lines.append(f"[{icon}] {device.display_name} ({device.status})")
        if device.product:
            lines.append(f"    Product:   {device.product}")
        if device.transport_id:
            lines.append(f"    Transport: {device.transport_id}")
    return "\n".join(lines)


def format_storage(mount: str, info: StorageInfo) -> str:
    return (
        f"Storage at {mount}\n"
        f"  Total:     {info.total_gb:.2f} GB\n"
        f"  Used:      {info.used_gb:.2f} GB ({info.used_percentage:.1f}%)\n"
        f"  Available: {info.available_gb:.2f} GB"
    )


def format_history(entries: Sequence[CommandLogEntry]) -> str:
    """One line per command, oldest first, with errors indented below."""
    if not entries:
        return "No commands recorded."

    lines = []
    for entry in entries:
        lines.append(
            f"{entry.display_time} [{entry.status_display}] "
            f"{entry.command} {entry.execution_time_display}".rstrip()
        )
        if entry.error:
            lines.append(f"    {entry.error}")
    return "\n".join(lines)
