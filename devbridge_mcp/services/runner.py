"""Device-bridge process runner with timeouts and lifecycle events.

Every call to :meth:`CommandRunner.run` publishes exactly two events to
subscribers: ``STARTING`` before the process is spawned and one terminal
event (``SUCCESS``, ``FAILED``, ``TIMEOUT`` or ``EXCEPTION``) afterwards.
The same transitions are written as text lines to the audit sink.

Timeout and cancellation race the process exit through one
``asyncio.wait`` call; either one kills the process and yields the
``TIMEOUT`` outcome.
"""

import asyncio
import codecs
import logging
import shlex
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from devbridge_mcp.models import CommandEvent, CommandResult, CommandStatus
from devbridge_mcp.protocols import AuditSink, CommandListener, ProgressSink
from devbridge_mcp.services.audit import LoggingAuditSink

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Command timed out"
CANCELLED_ERROR = "Command cancelled"

_READ_CHUNK = 4096
_MAX_LOGGED_OUTPUT = 1000


async def _pump(
    stream: asyncio.StreamReader | None,
    lines: list[str],
    progress: ProgressSink | None = None,
) -> None:
    """Collect non-empty lines from ``stream`` as they arrive.

    Lines end at ``\\n`` or ``\\r`` so carriage-return progress meters are
    forwarded too. Each line goes to ``progress`` immediately. Decoding is
    incremental so a UTF-8 sequence split between reads stays intact.
    """
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    while chunk := await stream.read(_READ_CHUNK):
        buffer += decoder.decode(chunk)
        *complete, buffer = buffer.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        for line in complete:
            _emit(line, lines, progress)
    buffer += decoder.decode(b"", final=True)
    _emit(buffer, lines, progress)


def _emit(line: str, lines: list[str], progress: ProgressSink | None) -> None:
    if not line:
        return
    lines.append(line)
    if progress is not None:
        try:
            progress(line)
        except Exception:
            logger.exception("Progress sink raised while handling %r", line)


def _truncate(text: str) -> str:
    if len(text) > _MAX_LOGGED_OUTPUT:
        return text[:_MAX_LOGGED_OUTPUT] + "... [truncated]"
    return text


class CommandRunner:
    """Spawn the device-bridge executable and report structured results."""

    def __init__(
        self,
        executable: str,
        audit_sink: AuditSink | None = None,
        default_timeout_ms: int = 30_000,
        kill_grace_ms: int = 1_000,
        command_prefix: str = "adb",
    ) -> None:
        """Initialize the runner.

        Args:
            executable: Resolved path of the device-bridge executable
            audit_sink: Receives one text line per lifecycle transition
            default_timeout_ms: Deadline used when a call passes none
            kill_grace_ms: How long to wait for a killed process to exit
            command_prefix: Program name shown in logged command text

        Raises:
            ValueError: If executable is empty
        """
        if not executable:
            raise ValueError("executable path must not be empty")

        self.executable = executable
        self.audit_sink: AuditSink = audit_sink or LoggingAuditSink()
        self.default_timeout_ms = default_timeout_ms
        self.kill_grace_ms = kill_grace_ms
        self.command_prefix = command_prefix
        self._listeners: list[CommandListener] = []

    def subscribe(self, listener: CommandListener) -> Callable[[], None]:
        """Register a lifecycle listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def format_command(self, arguments: str | Sequence[str]) -> str:
        """Render the invocation text recorded in logs and events."""
        text = arguments if isinstance(arguments, str) else shlex.join(arguments)
        return f"{self.command_prefix} {text}".strip()

    def _publish(self, event: CommandEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Command listener failed for %s", event.command)

    def _finish(
        self,
        command: str,
        start_time: datetime,
        started: float,
        status: CommandStatus,
        output: str | None = None,
        error: str | None = None,
        exit_code: int | None = None,
    ) -> timedelta:
        elapsed = timedelta(seconds=time.monotonic() - started)
        self._publish(
            CommandEvent(
                command=command,
                start_time=start_time,
                status=status,
                end_time=datetime.now(),
                execution_time=elapsed,
                output=output,
                error=error,
                exit_code=exit_code,
            )
        )
        return elapsed

    async def run(
        self,
        arguments: str | Sequence[str],
        timeout_ms: int | None = None,
        cancel_event: asyncio.Event | None = None,
        progress: ProgressSink | None = None,
    ) -> CommandResult:
        """Run the executable and wait for exit, timeout or cancellation.

        Args:
            arguments: Argument string (split POSIX-style) or argument list
            timeout_ms: Deadline in milliseconds (default: default_timeout_ms)
            cancel_event: When set, the process is killed like on timeout
            progress: Receives each stdout line as soon as it is read

        Returns:
            CommandResult; never raises for process or I/O failures
        """
        command = self.format_command(arguments)
        timeout_ms = self.default_timeout_ms if timeout_ms is None else timeout_ms
        start_time = datetime.now()
        started = time.monotonic()

        self.audit_sink.log_immediate(f"ADB Command Starting: {command}")
        self._publish(
            CommandEvent(command=command, start_time=start_time, status=CommandStatus.STARTING)
        )

        process: asyncio.subprocess.Process | None = None
        readers: list["asyncio.Future[None]"] = []
        try:
            argv = shlex.split(arguments) if isinstance(arguments, str) else list(arguments)
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout_lines: list[str] = []
            stderr_lines: list[str] = []
            readers += [
                asyncio.ensure_future(_pump(process.stdout, stdout_lines, progress)),
                asyncio.ensure_future(_pump(process.stderr, stderr_lines)),
            ]

            completed = await self._wait_for_exit(process, timeout_ms / 1000, cancel_event)

            if not completed:
                await self._terminate(process)
                await self._drain(readers, grace=0)
                elapsed = self._finish(
                    command, start_time, started, CommandStatus.TIMEOUT, error=TIMEOUT_ERROR
                )
                self.audit_sink.log_immediate(
                    f"ADB Command Timeout: {command} (after {elapsed.total_seconds():.2f}s)"
                )
                return CommandResult(success=False, error=TIMEOUT_ERROR)

            # A forked daemon may keep the pipes open after exit
            await self._drain(readers, grace=self.kill_grace_ms / 1000)

            output = "\n".join(stdout_lines).strip()
            error = "\n".join(stderr_lines).strip()
            returncode = process.returncode
            success = returncode == 0
            status = CommandStatus.SUCCESS if success else CommandStatus.FAILED

            elapsed = self._finish(
                command,
                start_time,
                started,
                status,
                output=output,
                error=error or None,
                exit_code=returncode,
            )
            seconds = elapsed.total_seconds()
            if success:
                suffix = f" - Output: {_truncate(output)}" if output else ""
                self.audit_sink.log_immediate(
                    f"ADB Command Success: {command} (completed in {seconds:.2f}s){suffix}"
                )
            else:
                self.audit_sink.log_immediate(
                    f"ADB Command Failed: {command} (failed in {seconds:.2f}s) "
                    f"- Exit Code: {returncode}, Error: {error}"
                )

            return CommandResult(
                success=success,
                output=output,
                error=error or None,
                returncode=returncode,
            )

        except asyncio.CancelledError:
            if process is not None and process.returncode is None:
                await asyncio.shield(self._terminate(process))
            for reader in readers:
                reader.cancel()
            elapsed = self._finish(
                command, start_time, started, CommandStatus.EXCEPTION, error=CANCELLED_ERROR
            )
            self.audit_sink.log_immediate(
                f"ADB Command Exception: {command} "
                f"(failed in {elapsed.total_seconds():.2f}s) - {CANCELLED_ERROR}"
            )
            raise

        except Exception as e:
            if process is not None and process.returncode is None:
                await self._terminate(process)
            await self._drain(readers, grace=0)
            message = str(e) or type(e).__name__
            elapsed = self._finish(
                command, start_time, started, CommandStatus.EXCEPTION, error=message
            )
            self.audit_sink.log_immediate(
                f"ADB Command Exception: {command} "
                f"(failed in {elapsed.total_seconds():.2f}s) - {message}"
            )
            logger.warning("Failed to run %s: %s", command, message)
            return CommandResult.failure(message)

    @staticmethod
    async def _wait_for_exit(
        process: asyncio.subprocess.Process,
        timeout_s: float,
        cancel_event: asyncio.Event | None,
    ) -> bool:
        """Wait for the process to exit.

        Returns:
            True if it exited, False on timeout or cancellation
        """
        exit_task = asyncio.ensure_future(process.wait())
        tasks = {exit_task}
        if cancel_event is not None:
            tasks.add(asyncio.ensure_future(cancel_event.wait()))
        try:
            done, _ = await asyncio.wait(
                tasks,
                timeout=max(timeout_s, 0),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        return exit_task in done

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Kill the process and give it kill_grace_ms to be reaped."""
        try:
            process.kill()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=self.kill_grace_ms / 1000)
        except asyncio.TimeoutError:
            logger.warning(
                "Process %s did not exit within %dms after kill",
                process.pid,
                self.kill_grace_ms,
            )

    @staticmethod
    async def _drain(readers: list["asyncio.Future[None]"], grace: float) -> None:
        """Let stream readers finish within ``grace`` seconds, then cancel them."""
        if grace > 0:
            await asyncio.wait(readers, timeout=grace)
        for reader in readers:
            if not reader.done():
                reader.cancel()
        await asyncio.gather(*readers, return_exceptions=True)
