"""Device-related data models."""

from dataclasses import dataclass

_BYTES_PER_GB = 1024.0 * 1024.0 * 1024.0


@dataclass
class Device:
    """A device reported by ``adb devices -l``.

    Instances are snapshots; re-resolve by ``id`` after each listing.
    """

    id: str
    status: str
    model: str | None = None
    device_name: str | None = None
    product: str | None = None
    transport_id: str | None = None

    @property
    def is_online(self) -> bool:
        """True only for the ``device`` state (not offline/unauthorized)."""
        return self.status == "device"

    @property
    def display_name(self) -> str:
        """Human readable name, falling back to the transport id."""
        if self.model:
            return f"{self.model} ({self.id})"
        if self.device_name:
            return f"{self.device_name} ({self.id})"
        return self.id


@dataclass(frozen=True)
class StorageInfo:
    """Free-space report for the device storage mount."""

    total_bytes: int
    used_bytes: int
    available_bytes: int

    @property
    def total_gb(self) -> float:
        return self.total_bytes / _BYTES_PER_GB

    @property
    def used_gb(self) -> float:
        return self.used_bytes / _BYTES_PER_GB

    @property
    def available_gb(self) -> float:
        return self.available_bytes / _BYTES_PER_GB

    @property
    def used_percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes * 100.0 / self.total_bytes
