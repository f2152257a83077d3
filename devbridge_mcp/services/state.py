"""Global state management for devbridge MCP."""

from devbridge_mcp.dependencies import Dependencies

# Global state (initialized on first access)
_deps: Dependencies | None = None


def get_dependencies() -> Dependencies:
    """Get or create the process-wide dependencies."""
    global _deps
    if _deps is None:
        _deps = Dependencies.create()
    return _deps


def set_dependencies(deps: Dependencies) -> None:
    """Set the global dependencies instance.

    Allows tests to inject fakes without modifying module internals.

    Args:
        deps: Dependencies instance to use globally.
    """
    global _deps
    _deps = deps


def reset_state() -> None:
    """Reset global state for testing.

    Detaches the current audit log and clears the singleton so the next
    access builds fresh dependencies.
    """
    global _deps
    if _deps is not None:
        _deps.cleanup()
    _deps = None
