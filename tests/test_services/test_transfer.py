"""Tests for batch BIOS/ROM transfers."""

import asyncio
import os
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from devbridge_mcp.models import BiosFileCopy, CommandResult, RomFileCopy
from devbridge_mcp.services.transfer import (
    CANCELLED_ERROR,
    FileTransferOrchestrator,
    rom_directory_name,
)

OK = CommandResult(success=True, output="1 file pushed", returncode=0)


@pytest.fixture
def bridge() -> MagicMock:
    bridge = MagicMock()
    bridge.push_file = AsyncMock(return_value=OK)
    bridge.path_exists = AsyncMock(return_value=True)
    bridge.verify_paths = AsyncMock(return_value=[])
    return bridge


@pytest.fixture
def orchestrator(bridge: MagicMock) -> FileTransferOrchestrator:
    return FileTransferOrchestrator(bridge, device_id="abc", arcade_map_url="https://example.invalid/map.txt")


def pushed_destinations(bridge: MagicMock) -> list[str]:
    return [call.args[1] for call in bridge.push_file.await_args_list]


@pytest.mark.parametrize(
    ("code", "name", "expected"),
    [
        ("PS", "Sony PlayStation", "Sony PlayStation (PS)"),
        ("FC", "Famicom", "Nintendo Entertainment System (FC)"),
        ("MD", "", "Sega Genesis (MD)"),
        ("GB", "", "GB (GB)"),
    ],
)
def test_rom_directory_name(code: str, name: str, expected: str) -> None:
    assert rom_directory_name(code, name) == expected


class TestBiosBatch:
    """Tests for copy_bios_files."""

    @pytest.mark.asyncio
    async def test_copies_in_order_to_bios_folders(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        files = [
            BiosFileCopy("/bios/scph1001.bin", "scph1001.bin", "PS"),
            BiosFileCopy("/bios/gba_bios.bin", "gba_bios.bin", "GBA"),
        ]
        progress: list[str] = []

        result = await orchestrator.copy_bios_files(files, progress.append)

        assert result.success is True
        assert result.output == "Transferred 2 files"
        assert pushed_destinations(bridge) == [
            "/mnt/SDCARD/Bios/PS/scph1001.bin",
            "/mnt/SDCARD/Bios/GBA/gba_bios.bin",
        ]
        assert progress[0] == "Starting BIOS file transfer to device (2 files)..."
        assert "Copying scph1001.bin (1/2)..." in progress
        assert "Copying gba_bios.bin (2/2)..." in progress
        assert progress[-1] == "Successfully transferred 2 BIOS file(s) to device!"

    @pytest.mark.asyncio
    async def test_push_progress_is_prefixed_with_file_name(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        async def fake_push(local: str, remote: str, device_id: Any, progress: Any, **_: Any) -> CommandResult:
            progress("[100%] pushing")
            return OK

        bridge.push_file.side_effect = fake_push
        progress: list[str] = []

        await orchestrator.copy_bios_files(
            [BiosFileCopy("/bios/scph1001.bin", "scph1001.bin", "PS")], progress.append
        )

        assert "scph1001.bin: [100%] pushing" in progress

    @pytest.mark.asyncio
    async def test_first_failure_stops_batch(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        failure = CommandResult(success=False, error="adb: error: no space left", returncode=1)
        bridge.push_file.side_effect = [OK, failure, OK]
        files = [BiosFileCopy(f"/bios/{n}.bin", f"{n}.bin", "PS") for n in "abc"]
        progress: list[str] = []

        result = await orchestrator.copy_bios_files(files, progress.append)

        assert result is failure
        assert bridge.push_file.await_count == 2
        assert progress[-1] == "Failed to copy b.bin: adb: error: no space left"

    @pytest.mark.asyncio
    async def test_cancel_before_second_item(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        cancel = asyncio.Event()

        async def push_then_cancel(*args: Any, **kwargs: Any) -> CommandResult:
            cancel.set()
            return OK

        bridge.push_file.side_effect = push_then_cancel
        files = [BiosFileCopy(f"/bios/{n}.bin", f"{n}.bin", "PS") for n in "ab"]

        result = await orchestrator.copy_bios_files(files, cancel_event=cancel)

        assert result.success is False
        assert result.error == CANCELLED_ERROR
        assert bridge.push_file.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_batch_succeeds(self, orchestrator: FileTransferOrchestrator) -> None:
        result = await orchestrator.copy_bios_files([])

        assert result.success is True
        assert result.output == "Transferred 0 files"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failure(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        bridge.push_file.side_effect = RuntimeError("bridge exploded")

        result = await orchestrator.copy_bios_files([BiosFileCopy("/b/x.bin", "x.bin", "PS")])

        assert result.success is False
        assert result.error == "bridge exploded"


class TestArcadeMap:
    """Tests for the FBN map.txt written after neogeo.zip."""

    @staticmethod
    def capture_map(bridge: MagicMock) -> dict[str, str]:
        captured: dict[str, str] = {}

        async def fake_push(local: str, remote: str, *args: Any, **kwargs: Any) -> CommandResult:
            if remote.endswith("map.txt"):
                captured["path"] = local
                captured["content"] = Path(local).read_text(encoding="utf-8")
            return OK

        bridge.push_file.side_effect = fake_push
        return captured

    @pytest.mark.asyncio
    async def test_downloaded_map_hides_bios(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        captured = self.capture_map(bridge)
        response = MagicMock()
        response.text = "mslug.zip\tMetal Slug\nneogeo.zip\tNeo Geo Bios\n"
        progress: list[str] = []

        with patch("devbridge_mcp.services.transfer.requests.get", return_value=response) as get:
            result = await orchestrator.copy_bios_files(
                [BiosFileCopy("/bios/neogeo.zip", "neogeo.zip", "FBN")], progress.append
            )

        assert result.success is True
        get.assert_called_once()
        assert pushed_destinations(bridge) == [
            "/mnt/SDCARD/Bios/FBN/neogeo.zip",
            "/mnt/SDCARD/Bios/FBN/map.txt",
        ]
        assert captured["content"] == "mslug.zip\tMetal Slug\nneogeo.zip\t.Neo Geo Bios\n"
        assert not os.path.exists(captured["path"])
        assert "Arcade map.txt created successfully" in progress

    @pytest.mark.asyncio
    async def test_network_error_uses_fallback_map(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        captured = self.capture_map(bridge)
        progress: list[str] = []

        with patch(
            "devbridge_mcp.services.transfer.requests.get",
            side_effect=requests.ConnectionError("offline"),
        ):
            result = await orchestrator.copy_bios_files(
                [BiosFileCopy("/bios/neogeo.zip", "neogeo.zip", "FBN")], progress.append
            )

        assert result.success is True
        assert captured["content"] == "neogeo.zip\t.Neo Geo Bios\n"
        assert "Using basic map.txt (network error)" in progress

    @pytest.mark.asyncio
    async def test_http_error_uses_fallback_map(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        captured = self.capture_map(bridge)
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        progress: list[str] = []

        with patch("devbridge_mcp.services.transfer.requests.get", return_value=response):
            await orchestrator.copy_bios_files(
                [BiosFileCopy("/bios/neogeo.zip", "neogeo.zip", "FBN")], progress.append
            )

        assert captured["content"] == "neogeo.zip\t.Neo Geo Bios\n"
        assert "Using basic map.txt (full download failed)" in progress

    @pytest.mark.asyncio
    async def test_map_push_failure_does_not_fail_batch(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        bridge.push_file.side_effect = [
            OK,
            CommandResult(success=False, error="read-only file system", returncode=1),
        ]
        progress: list[str] = []

        with patch(
            "devbridge_mcp.services.transfer.requests.get",
            side_effect=requests.Timeout("slow"),
        ):
            result = await orchestrator.copy_bios_files(
                [BiosFileCopy("/bios/neogeo.zip", "neogeo.zip", "FBN")], progress.append
            )

        assert result.success is True
        assert "Failed to create map.txt: read-only file system" in progress

    @pytest.mark.asyncio
    async def test_other_systems_do_not_get_a_map(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        with patch("devbridge_mcp.services.transfer.requests.get") as get:
            await orchestrator.copy_bios_files(
                [BiosFileCopy("/bios/neogeo.zip", "neogeo.zip", "NEOGEO")]
            )

        get.assert_not_called()
        assert bridge.push_file.await_count == 1


class TestRomBatch:
    """Tests for copy_rom_files."""

    @pytest.mark.asyncio
    async def test_rom_destination_uses_source_file_name(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        files = [
            RomFileCopy("/roms/Sonic The Hedgehog.md", "Sonic", "MD", "Sega Mega Drive"),
            RomFileCopy("/roms/Crash.chd", "Crash", "PS", "Sony PlayStation"),
        ]
        progress: list[str] = []

        result = await orchestrator.copy_rom_files(files, progress.append)

        assert result.success is True
        assert pushed_destinations(bridge) == [
            "/mnt/SDCARD/Roms/Sega Genesis (MD)/Sonic The Hedgehog.md",
            "/mnt/SDCARD/Roms/Sony PlayStation (PS)/Crash.chd",
        ]
        assert progress[0] == "Starting ROM file transfer to device (2 files)..."
        assert progress[-1] == "Successfully transferred 2 ROM file(s) to device!"
        assert all(call.args[2] == "abc" for call in bridge.push_file.await_args_list)


class TestVerification:
    """Tests for installation and file verification."""

    @staticmethod
    def existing(bridge: MagicMock, paths: set[str]) -> None:
        async def path_exists(path: str, device_id: Any = None) -> bool:
            return path in paths

        bridge.path_exists.side_effect = path_exists

    @pytest.mark.asyncio
    async def test_installation_with_version_file(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        self.existing(
            bridge,
            {"/mnt/SDCARD", "/mnt/SDCARD/Bios", "/mnt/SDCARD/Roms", "/mnt/SDCARD/.system/version.txt"},
        )

        result = await orchestrator.verify_installation()

        assert result.success is True

    @pytest.mark.asyncio
    async def test_missing_roms_directory(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        self.existing(bridge, {"/mnt/SDCARD", "/mnt/SDCARD/Bios", "/mnt/SDCARD/MinUI.zip"})

        result = await orchestrator.verify_installation()

        assert result.success is False
        assert "ROMs directory not found at /mnt/SDCARD/Roms" in (result.error or "")

    @pytest.mark.asyncio
    async def test_missing_version_marker(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        self.existing(bridge, {"/mnt/SDCARD", "/mnt/SDCARD/Bios", "/mnt/SDCARD/Roms"})

        result = await orchestrator.verify_installation()

        assert result.success is False
        assert "version file not found" in (result.error or "")

    @pytest.mark.asyncio
    async def test_missing_base_path(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        self.existing(bridge, set())

        result = await orchestrator.verify_installation()

        assert result.success is False
        assert "/mnt/SDCARD" in (result.error or "")

    @pytest.mark.asyncio
    async def test_verify_files_delegates(
        self, orchestrator: FileTransferOrchestrator, bridge: MagicMock
    ) -> None:
        bridge.verify_paths.return_value = ["/mnt/SDCARD/Bios/PS/scph1001.bin"]

        missing = await orchestrator.verify_files(["/mnt/SDCARD/Bios/PS/scph1001.bin"])

        assert missing == ["/mnt/SDCARD/Bios/PS/scph1001.bin"]
        bridge.verify_paths.assert_awaited_once_with(["/mnt/SDCARD/Bios/PS/scph1001.bin"], "abc")
