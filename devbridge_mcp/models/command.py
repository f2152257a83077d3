"""Command execution data models."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class CommandStatus(Enum):
    """Lifecycle state of a device-bridge command."""

    STARTING = "starting"
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    EXCEPTION = "exception"

    @property
    def is_terminal(self) -> bool:
        """Whether the command has finished in this state."""
        return self is not CommandStatus.STARTING


@dataclass(frozen=True)
class CommandResult:
    """Result of a device-bridge command execution.

    ``error`` is None when the command wrote nothing to stderr.
    ``returncode`` is None for timeouts and spawn failures.
    """

    success: bool
    output: str = ""
    error: str | None = None
    returncode: int | None = None

    @classmethod
    def failure(cls, error: str) -> "CommandResult":
        """Build a failed result that never reached the executable."""
        return cls(success=False, error=error)


@dataclass(frozen=True)
class CommandEvent:
    """Lifecycle notification published by the command runner."""

    command: str
    start_time: datetime
    status: CommandStatus
    end_time: datetime | None = None
    execution_time: timedelta | None = None
    output: str | None = None
    error: str | None = None
    exit_code: int | None = None


_STATUS_DISPLAY = {
    CommandStatus.STARTING: "Starting...",
    CommandStatus.SUCCESS: "Success",
    CommandStatus.FAILED: "Failed",
    CommandStatus.TIMEOUT: "Timeout",
    CommandStatus.EXCEPTION: "Exception",
}


@dataclass
class CommandLogEntry:
    """One audit record, updated in place when its command finishes."""

    command: str
    start_time: datetime
    status: CommandStatus = CommandStatus.STARTING
    end_time: datetime | None = None
    execution_time: timedelta | None = None
    output: str | None = None
    error: str | None = None
    exit_code: int | None = None

    @classmethod
    def from_event(cls, event: CommandEvent) -> "CommandLogEntry":
        """Create a new entry from a lifecycle event."""
        entry = cls(command=event.command, start_time=event.start_time)
        entry.apply(event)
        return entry

    def matches(self, event: CommandEvent) -> bool:
        """Whether the event belongs to this entry."""
        return self.command == event.command and self.start_time == event.start_time

    def apply(self, event: CommandEvent) -> None:
        """Copy the mutable fields of an event onto this entry."""
        self.status = event.status
        self.end_time = event.end_time
        self.execution_time = event.execution_time
        self.output = event.output
        self.error = event.error
        self.exit_code = event.exit_code

    @property
    def display_time(self) -> str:
        """Start time as HH:MM:SS.fff."""
        return self.start_time.strftime("%H:%M:%S.") + f"{self.start_time.microsecond // 1000:03d}"

    @property
    def status_display(self) -> str:
        return _STATUS_DISPLAY[self.status]

    @property
    def status_css_class(self) -> str:
        return f"status-{self.status.value}"

    @property
    def execution_time_display(self) -> str:
        """Duration like "(1.23s)", or "(running...)" while in flight."""
        if self.execution_time is not None:
            return f"({self.execution_time.total_seconds():.2f}s)"
        if self.status is CommandStatus.STARTING:
            return "(running...)"
        return ""
