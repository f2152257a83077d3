"""Parsers for device-bridge command output."""

import re
from typing import Final

from devbridge_mcp.models import Device, StorageInfo

ANSI_ESCAPE: Final = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")

DEVICES_HEADER: Final = "List of devices attached"

# Substrings adb/toybox print when a listed directory is missing
MISSING_PATH_MARKERS: Final[tuple[str, ...]] = (
    "No such file or directory",
    "cannot access",
    "not found",
    "can't cd to",
    "does not exist",
)

HASH_HEX_LENGTHS: Final[dict[str, int]] = {
    "md5": 32,
    "sha1": 40,
    "sha256": 64,
}

_PROPERTY_FIELDS: Final[dict[str, str]] = {
    "model": "model",
    "device": "device_name",
    "product": "product",
    "transport_id": "transport_id",
}


def strip_ansi(text: str) -> str:
    """Remove ANSI colour and cursor escape sequences."""
    if not text:
        return text
    return ANSI_ESCAPE.sub("", text)


def parse_device_properties(device: Device, tokens: list[str]) -> None:
    """Apply ``key:value`` tokens from a device row onto ``device``.

    Tokens without a colon, or with nothing before or after it, are skipped.
    Unknown keys are ignored.
    """
    for token in tokens:
        key, sep, value = token.partition(":")
        if not sep or not key or not value:
            continue
        field_name = _PROPERTY_FIELDS.get(key.lower())
        if field_name:
            setattr(device, field_name, value)


def parse_device_line(line: str) -> Device | None:
    """Parse one row of ``adb devices -l``.

    Returns:
        Device, or None if the row has fewer than two tokens.
    """
    parts = line.split()
    if len(parts) < 2:
        return None
    device = Device(id=parts[0], status=parts[1])
    parse_device_properties(device, parts[2:])
    return device


def parse_devices_output(output: str) -> list[Device]:
    """Parse the full ``adb devices -l`` report in listing order."""
    devices = []
    for raw in output.splitlines():
        line = raw.strip()
        # Daemon start-up chatter is prefixed with "*"
        if not line or line.startswith(DEVICES_HEADER) or line.startswith("*"):
            continue
        device = parse_device_line(line)
        if device is not None:
            devices.append(device)
    return devices


def is_missing_path_output(text: str) -> bool:
    """Whether combined stdout/stderr says the target path is missing."""
    return any(marker in text for marker in MISSING_PATH_MARKERS)


def parse_listing(output: str) -> list[str]:
    """Turn ``ls -1`` output into entry names.

    ANSI codes are stripped and the trailing ``/`` of ``-d */`` entries
    is removed.
    """
    names = []
    for raw in output.splitlines():
        name = strip_ansi(raw.strip()).rstrip("/")
        if not name or "can't cd" in name or "No such file" in name:
            continue
        names.append(name)
    return names


def parse_df_output(output: str, mount_path: str) -> StorageInfo | None:
    """Parse a ``df`` report into byte counts.

    The data row is the last row mentioning ``mount_path`` or
    ``storage``, or not starting with the ``Filesystem`` header. Columns
    two to four are 1K-block counts.

    Returns:
        StorageInfo, or None when the report is malformed.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        return None

    candidates = [
        line
        for line in lines
        if mount_path in line or "storage" in line or not line.startswith("Filesystem")
    ]
    if not candidates:
        return None

    parts = candidates[-1].split()
    if len(parts) < 4:
        return None

    try:
        total_kb, used_kb, available_kb = (int(p) for p in parts[1:4])
    except ValueError:
        return None

    return StorageInfo(
        total_bytes=total_kb * 1024,
        used_bytes=used_kb * 1024,
        available_bytes=available_kb * 1024,
    )


def parse_hash_output(output: str, algorithm: str = "md5") -> str | None:
    """Extract and validate the digest from ``<algo>sum`` output.

    Output looks like ``<hex>  <path>``. The first token is lower-cased and
    must be exactly the digest length in hex, otherwise None is returned.
    """
    length = HASH_HEX_LENGTHS.get(algorithm)
    if length is None or not output:
        return None
    parts = output.split()
    if not parts:
        return None
    digest = parts[0].strip().lower()
    if re.fullmatch(rf"[0-9a-f]{{{length}}}", digest):
        return digest
    return None
