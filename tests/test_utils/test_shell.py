"""Tests for shell argument escaping."""

import shlex

import pytest

from devbridge_mcp.utils.shell import escape_shell_arg


@pytest.mark.parametrize(
    "value",
    [
        "/mnt/SDCARD/Roms",
        "/mnt/SDCARD/Roms/Sony PlayStation (PS)",
        "it's a file.bin",
        "a'b'c''",
        "'; rm -rf / #",
        "$(reboot) `id` && echo pwned",
        "tab\there\nnewline",
        "*?[]{}~!",
    ],
)
def test_escape_round_trips_through_posix_shell(value: str) -> None:
    """A POSIX shell parses the escaped value back into exactly one word."""
    assert shlex.split(escape_shell_arg(value)) == [value]


def test_escape_wraps_in_single_quotes() -> None:
    assert escape_shell_arg("/mnt/SDCARD") == "'/mnt/SDCARD'"


def test_escape_embedded_quote() -> None:
    """Embedded quotes close, escape and reopen the quoted string."""
    assert escape_shell_arg("it's") == "'it'\\''s'"


@pytest.mark.parametrize("value", ["", None])
def test_escape_empty_value(value: str | None) -> None:
    assert escape_shell_arg(value) == "''"
