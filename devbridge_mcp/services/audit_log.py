"""Bounded command history for live display.

Locking Strategy:
- `_lock` (threading.Lock) protects the `_entries` deque only
- Listeners are called after the lock is released
- Readers get list snapshots taken under the lock

Entries are matched to runner events by ``(command, start_time)``:
the STARTING event creates an entry and the terminal event updates the
same object in place. When the deque exceeds capacity the oldest entry
is dropped.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable

from devbridge_mcp.config import MAX_HISTORY_SIZE
from devbridge_mcp.models import CommandEvent, CommandLogEntry
from devbridge_mcp.protocols import CommandExecutor

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = MAX_HISTORY_SIZE

ChangeListener = Callable[[str], None]
AddedListener = Callable[[CommandLogEntry], None]

# Property names reported to change listeners
HISTORY = "history"
LATEST = "latest"
COUNT = "count"
IS_VISIBLE = "is_visible"
IS_EXPANDED = "is_expanded"


class CommandAuditLog:
    """Thread-safe ring buffer of recent device-bridge commands."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize an empty log.

        Args:
            capacity: Maximum number of retained entries (1 to 50)

        Raises:
            ValueError: If capacity is outside that range
        """
        if not 0 < capacity <= MAX_HISTORY_SIZE:
            raise ValueError(
                f"capacity must be between 1 and {MAX_HISTORY_SIZE}, got {capacity}"
            )

        self.capacity = capacity
        self._entries: deque[CommandLogEntry] = deque()
        self._lock = threading.Lock()
        self._is_visible = False
        self._is_expanded = True
        self._change_listeners: list[ChangeListener] = []
        self._added_listeners: list[AddedListener] = []
        self._unsubscribe: Callable[[], None] | None = None

    # -------- Runner wiring --------

    def attach(self, runner: CommandExecutor) -> None:
        """Start recording events from ``runner`` (replaces any previous one)."""
        self.detach()
        self._unsubscribe = runner.subscribe(self.record)

    def detach(self) -> None:
        """Stop recording events from the attached runner."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def record(self, event: CommandEvent) -> None:
        """Find-or-create the entry for ``event`` and update it."""
        added: CommandLogEntry | None = None

        with self._lock:
            existing = next((e for e in self._entries if e.matches(event)), None)
            if existing is not None:
                existing.apply(event)
            else:
                added = CommandLogEntry.from_event(event)
                self._entries.append(added)
                while len(self._entries) > self.capacity:
                    self._entries.popleft()

        if added is not None:
            for listener in list(self._added_listeners):
                self._call(listener, added)
        self._notify(HISTORY, LATEST, COUNT)

    # -------- Read accessors --------

    def history(self) -> list[CommandLogEntry]:
        """Snapshot of retained entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def latest(self) -> CommandLogEntry | None:
        """Most recently started command, if any."""
        with self._lock:
            return self._entries[-1] if self._entries else None

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()
        self._notify(HISTORY, LATEST, COUNT)

    # -------- Display state --------

    @property
    def is_visible(self) -> bool:
        return self._is_visible

    @is_visible.setter
    def is_visible(self, value: bool) -> None:
        if self._is_visible != value:
            self._is_visible = value
            self._notify(IS_VISIBLE)

    @property
    def is_expanded(self) -> bool:
        return self._is_expanded

    @is_expanded.setter
    def is_expanded(self, value: bool) -> None:
        if self._is_expanded != value:
            self._is_expanded = value
            self._notify(IS_EXPANDED)

    def show(self) -> None:
        self.is_visible = True

    def hide(self) -> None:
        self.is_visible = False

    def toggle_visibility(self) -> None:
        self.is_visible = not self.is_visible

    def expand(self) -> None:
        self.is_expanded = True

    def collapse(self) -> None:
        self.is_expanded = False

    def toggle_expanded(self) -> None:
        self.is_expanded = not self.is_expanded

    # -------- Subscriptions --------

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener(property_name)`` after every mutation.

        Returns:
            Callable that removes the listener again
        """
        self._change_listeners.append(listener)
        return lambda: self._remove(self._change_listeners, listener)

    def on_added(self, listener: AddedListener) -> Callable[[], None]:
        """Call ``listener(entry)`` whenever a new entry is appended.

        Returns:
            Callable that removes the listener again
        """
        self._added_listeners.append(listener)
        return lambda: self._remove(self._added_listeners, listener)

    @staticmethod
    def _remove(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _notify(self, *names: str) -> None:
        for name in names:
            for listener in list(self._change_listeners):
                self._call(listener, name)

    @staticmethod
    def _call(listener: Callable, arg: object) -> None:
        try:
            listener(arg)
        except Exception:
            logger.exception("Command log listener failed")
