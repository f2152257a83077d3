"""Tests for server wiring and lifespan."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from devbridge_mcp.config import Config
from devbridge_mcp.dependencies import Dependencies
from devbridge_mcp.models import Device
from devbridge_mcp.server import app_lifespan, create_server
from devbridge_mcp.services.audit_log import CommandAuditLog
from devbridge_mcp.services.state import reset_state, set_dependencies


@pytest.fixture
def deps():
    bridge = MagicMock()
    bridge.is_available = AsyncMock(return_value=True)
    bridge.list_devices = AsyncMock(return_value=[Device(id="abc", status="device")])
    deps = Dependencies(
        config=Config(), runner=MagicMock(), audit_log=MagicMock(spec=CommandAuditLog), bridge=bridge
    )
    set_dependencies(deps)
    yield deps
    reset_state()


@pytest.mark.asyncio
async def test_registers_tools_and_resources() -> None:
    server = create_server()

    tools = await server.get_tools()
    resources = await server.get_resources()

    assert set(tools) == {
        "devices",
        "device_files",
        "device_transfer",
        "copy_bios",
        "copy_roms",
        "command_log",
    }
    assert {"devices://list", "commands://history", "commands://viewer"} <= set(resources)


@pytest.mark.asyncio
async def test_lifespan_probes_adb_and_cleans_up(deps: Dependencies) -> None:
    server = MagicMock()

    async with app_lifespan(server) as state:
        assert state == {"adb_available": True, "devices": ["abc"]}
        assert server.deps is deps

    deps.audit_log.detach.assert_called_once()


@pytest.mark.asyncio
async def test_lifespan_without_adb(deps: Dependencies) -> None:
    deps.bridge.is_available.return_value = False

    async with app_lifespan(MagicMock()) as state:
        assert state == {"adb_available": False, "devices": []}

    deps.bridge.list_devices.assert_not_awaited()
