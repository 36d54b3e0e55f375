"""Queue item model and its lifecycle state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from dropctl.core.exceptions import InvalidTransitionError

if TYPE_CHECKING:
    from dropctl.uploaders.sources import ByteSource


class ItemStatus(Enum):
    """Lifecycle states of a queued file."""

    QUEUED = "queued"
    INITIALIZING = "initializing"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (ItemStatus.DONE, ItemStatus.FAILED)

    @property
    def is_active(self) -> bool:
        """Check if the item currently holds the transfer slot."""
        return self in (ItemStatus.INITIALIZING, ItemStatus.UPLOADING)

    @property
    def label(self) -> str:
        """Display label for queue listings."""
        return _LABELS[self]


_LABELS = {
    ItemStatus.QUEUED: "Queued",
    ItemStatus.INITIALIZING: "Starting",
    ItemStatus.UPLOADING: "Uploading",
    ItemStatus.DONE: "Done",
    ItemStatus.FAILED: "Failed",
}

ALLOWED_TRANSITIONS: frozenset[tuple[ItemStatus, ItemStatus]] = frozenset(
    {
        (ItemStatus.QUEUED, ItemStatus.INITIALIZING),
        (ItemStatus.INITIALIZING, ItemStatus.UPLOADING),
        (ItemStatus.INITIALIZING, ItemStatus.FAILED),
        (ItemStatus.UPLOADING, ItemStatus.DONE),
        (ItemStatus.UPLOADING, ItemStatus.FAILED),
    }
)


def check_transition(item_id: str, current: ItemStatus, target: ItemStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if (current, target) not in ALLOWED_TRANSITIONS:
        raise InvalidTransitionError(item_id, current.value, target.value)


@dataclass(frozen=True)
class QueueCandidate:
    """A byte source paired with its destination path, not yet queued."""

    source: "ByteSource"
    relpath: str


@dataclass
class QueueItem:
    """A file accepted into the upload queue."""

    id: str
    source: "ByteSource"
    relpath: str
    status: ItemStatus = ItemStatus.QUEUED
    progress: int = 0
    upload_id: Optional[str] = None
    final_relpath: Optional[str] = None
    server_sha256: Optional[str] = None
    error: str = ""

    @property
    def size(self) -> int:
        """Size of the byte source."""
        return self.source.size

    @classmethod
    def table_columns(cls) -> list[str]:
        """Return columns for table output."""
        return ["relpath", "size", "status", "progress", "final_relpath"]

    def to_row(self, columns: list[str] | None = None) -> dict[str, str]:
        """Convert to row for table output."""
        cols = columns or self.table_columns()
        data = self.to_dict()
        data["status"] = self.status.label
        data["progress"] = f"{self.progress}%"
        return {col: "" if data.get(col) is None else str(data[col]) for col in cols}

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "relpath": self.relpath,
            "size": self.size,
            "status": self.status.value,
            "progress": self.progress,
            "upload_id": self.upload_id,
            "final_relpath": self.final_relpath,
            "server_sha256": self.server_sha256,
            "error": self.error,
        }
