"""Protocol interfaces for dependency inversion.

The command runner, audit log and bridge service only talk to each other
through these contracts, so tests can pass plain fakes:

    class RecordingSink:
        def __init__(self):
            self.lines = []

        def log_immediate(self, message: str) -> None:
            self.lines.append(message)

    runner = CommandRunner("adb", audit_sink=RecordingSink())
"""

import asyncio
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from devbridge_mcp.models import CommandEvent, CommandResult

ProgressSink = Callable[[str], None]
"""Receives human readable progress lines as they arrive."""

CommandListener = Callable[[CommandEvent], None]
"""Receives command lifecycle events."""


@runtime_checkable
class AuditSink(Protocol):
    """Append-only, timestamped diagnostic text log."""

    def log_immediate(self, message: str) -> None:
        """Write one line; the sink adds the timestamp."""
        ...


@runtime_checkable
class CommandExecutor(Protocol):
    """Anything able to run device-bridge commands.

    Implementations must never raise for process failures; they report
    them through the returned CommandResult.
    """

    async def run(
        self,
        arguments: str | Sequence[str],
        timeout_ms: int | None = None,
        cancel_event: asyncio.Event | None = None,
        progress: ProgressSink | None = None,
    ) -> CommandResult:
        """Run the executable with ``arguments`` and wait for it.

        Args:
            arguments: Argument string (split POSIX-style) or argument list
            timeout_ms: Deadline in milliseconds, or None for the default
            cancel_event: Cooperative cancellation signal
            progress: Receives each stdout line as it is produced

        Returns:
            CommandResult describing the outcome
        """
        ...

    def subscribe(self, listener: CommandListener) -> Callable[[], None]:
        """Register a lifecycle listener and return its unsubscribe callable."""
        ...
