"""Batch transfer data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BiosFileCopy:
    """A BIOS file waiting to be pushed to ``Bios/<system_code>/``."""

    source_path: str
    file_name: str
    system_code: str


@dataclass(frozen=True)
class RomFileCopy:
    """A ROM file waiting to be pushed to its system's ROM directory."""

    source_path: str
    file_name: str
    system_code: str
    system_name: str = ""
