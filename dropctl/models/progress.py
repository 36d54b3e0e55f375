"""Status and run summary models.

Provides dataclasses for the status line and transfer run outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class StatusTone(Enum):
    """Tone of the single status line."""

    INFO = "info"
    OK = "ok"
    ERROR = "error"
    WARN = "warn"


@dataclass(frozen=True)
class StatusMessage:
    """Most recent outcome shown to the user."""

    message: str
    tone: StatusTone = StatusTone.INFO


@dataclass
class RunSummary:
    """Outcome of one pass of the executor over the queue."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    bytes_sent: int = 0
    duration: float = 0.0
    portal_closed: bool = False
    close_error: str = ""
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every attempted item was transferred."""
        return self.failed == 0

    @property
    def throughput_bps(self) -> float:
        """Average transfer rate over the run in bytes per second."""
        if self.duration <= 0:
            return 0.0
        return self.bytes_sent / self.duration
