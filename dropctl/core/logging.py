"""Logging setup, run-scoped log context, and the transfer audit trail."""

from __future__ import annotations

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
AUDIT_LOGGER_NAME = "dropctl.audit"

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure stderr logging for the CLI.

    Args:
        level: Level used when neither flag is set.
        quiet: Only errors.
        verbose: Everything down to debug, including the audit trail.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, stream=sys.stderr)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _fields(context: dict[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in context.items())


class LogContext:
    """Logs the start, end, and duration of one operation.

    Example:
        with LogContext("upload run", logger, portal="p_abc123") as ctx:
            ...
            ctx.warning("Continuing after failed item %s", relpath)
    """

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None, **context: Any):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.context = context
        self._started: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Seconds since entering the block, 0 before that."""
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started

    def __enter__(self) -> LogContext:
        self._started = time.monotonic()
        self.logger.info("Starting %s (%s)", self.operation, _fields(self.context))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None:
            self.logger.info("%s finished in %.2fs", self.operation, self.elapsed)
        else:
            self.logger.error("%s aborted after %.2fs: %s", self.operation, self.elapsed, exc_val)

    def warning(self, message: str, *args: Any) -> None:
        """Log a warning tagged with the operation and its context."""
        self.logger.warning(
            f"[{self.operation}] {message} ({_fields(self.context)})", *args
        )


class AuditLogger:
    """Records claims, committed or failed uploads, and portal closes.

    Each record is one log line on the ``dropctl.audit`` logger; failures
    are logged at WARNING so they show without ``--verbose``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_operation(
        self,
        operation: str,
        *,
        portal: Optional[str] = None,
        relpath: Optional[str] = None,
        success: bool = True,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log an auditable operation.

        Args:
            operation: claim, upload, or close.
            portal: Portal ID.
            relpath: Destination path of the file involved.
            success: Whether the operation succeeded.
            details: Extra fields such as size or error text.
        """
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "operation": operation,
            "success": success,
        }
        record.update(
            (key, value) for key, value in (("portal", portal), ("relpath", relpath)) if value
        )
        if details:
            record["details"] = details

        self.logger.log(logging.INFO if success else logging.WARNING, "AUDIT: %s", record)


def get_audit_logger() -> AuditLogger:
    return AuditLogger()
