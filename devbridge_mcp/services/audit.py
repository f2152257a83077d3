"""Audit sink backed by the standard logging module."""

import logging

AUDIT_LOGGER_NAME = "devbridge_mcp.audit"
AUDIT_LINE_FORMAT = "[%(asctime)s] %(message)s"
AUDIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LoggingAuditSink:
    """Write audit lines to the ``devbridge_mcp.audit`` logger.

    Timestamps come from the handlers attached to that logger; see
    :func:`attach_audit_file` for the on-disk format.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_immediate(self, message: str) -> None:
        self.logger.info(message)


def attach_audit_file(path: str, logger: logging.Logger | None = None) -> logging.Handler:
    """Append audit lines as ``[YYYY-MM-DD HH:MM:SS] message`` to ``path``.

    Args:
        path: Log file path, created if missing
        logger: Logger to attach to (default: the audit logger)

    Returns:
        The attached handler, so callers can remove it again
    """
    target = logger or logging.getLogger(AUDIT_LOGGER_NAME)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(AUDIT_LINE_FORMAT, AUDIT_DATE_FORMAT))
    handler.setLevel(logging.INFO)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > logging.INFO:
        target.setLevel(logging.INFO)
    return handler
