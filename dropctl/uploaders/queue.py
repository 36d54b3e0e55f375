"""Ordered upload queue with byte accounting.

The queue is the single writer for item state and byte counters. Items are
appended, never removed; their status only moves forward through the
transitions in ``dropctl.models.queue.ALLOWED_TRANSITIONS``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable

from dropctl.core.exceptions import PathValidationError
from dropctl.core.validation import sanitize_relpath
from dropctl.models.queue import ItemStatus, QueueCandidate, QueueItem, check_transition

logger = logging.getLogger(__name__)

ItemListener = Callable[[QueueItem], None]


def make_local_id() -> str:
    """Locally unique queue item ID."""
    return uuid.uuid4().hex


class UploadQueue:
    """Queued items in enqueue order plus total/uploaded byte counters."""

    def __init__(self) -> None:
        self._items: list[QueueItem] = []
        self._index: dict[str, QueueItem] = {}
        self._total_bytes = 0
        self._completed_bytes = 0
        self._uploaded_bytes = 0
        self._listeners: list[ItemListener] = []

    # =========================================================================
    # Accessors
    # =========================================================================

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def items(self) -> list[QueueItem]:
        """Snapshot of all items in enqueue order."""
        return list(self._items)

    @property
    def total_bytes(self) -> int:
        """Sum of sizes of every item ever added."""
        return self._total_bytes

    @property
    def uploaded_bytes(self) -> int:
        """Completed bytes plus bytes sent for the active item."""
        return self._uploaded_bytes

    @property
    def completed_bytes(self) -> int:
        """Bytes of items that reached done."""
        return self._completed_bytes

    @property
    def queued_count(self) -> int:
        return sum(1 for item in self._items if item.status is ItemStatus.QUEUED)

    @property
    def active_count(self) -> int:
        """Items currently initializing or uploading."""
        return sum(1 for item in self._items if item.status.is_active)

    @property
    def overall_progress(self) -> int:
        """Whole-queue completion percentage, 0 when empty."""
        if self._total_bytes <= 0:
            return 0
        return min(100, round(self._uploaded_bytes / self._total_bytes * 100))

    def get(self, item_id: str) -> QueueItem:
        """Look up an item by ID.

        Raises:
            KeyError: If no such item was ever queued.
        """
        return self._index[item_id]

    def pending(self) -> list[QueueItem]:
        """Items still queued, in enqueue order."""
        return [item for item in self._items if item.status is ItemStatus.QUEUED]

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: ItemListener) -> Callable[[], None]:
        """Register a callback for item changes; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, item: QueueItem) -> None:
        for listener in list(self._listeners):
            listener(item)

    # =========================================================================
    # Mutators
    # =========================================================================

    def add(self, candidates: Iterable[QueueCandidate]) -> list[QueueItem]:
        """Append candidates as queued items.

        Candidates whose destination path cannot be sanitised are skipped.

        Returns:
            The items accepted, in order.
        """
        added: list[QueueItem] = []
        for candidate in candidates:
            if candidate.source is None:
                continue
            hint = candidate.relpath or candidate.source.relative_path or candidate.source.name
            try:
                relpath = sanitize_relpath(hint)
            except PathValidationError as e:
                logger.warning("Not queueing %s: %s", hint, e.reason)
                continue
            item = QueueItem(id=make_local_id(), source=candidate.source, relpath=relpath)
            self._items.append(item)
            self._index[item.id] = item
            self._total_bytes += item.size
            added.append(item)

        for item in added:
            self._notify(item)
        if added:
            logger.debug("Queued %d item(s), total %d bytes", len(added), self._total_bytes)
        return added

    def transition(self, item_id: str, status: ItemStatus) -> QueueItem:
        """Move an item to a new status.

        Raises:
            InvalidTransitionError: If the change is not a permitted forward step.
        """
        item = self.get(item_id)
        check_transition(item_id, item.status, status)
        item.status = status
        if status is ItemStatus.INITIALIZING or status is ItemStatus.UPLOADING:
            item.progress = 0
        elif status is ItemStatus.DONE:
            item.progress = 100
        self._notify(item)
        return item

    def set_progress(self, item_id: str, percent: int) -> None:
        """Update the percentage of the uploading item."""
        item = self.get(item_id)
        if item.status is not ItemStatus.UPLOADING:
            return
        item.progress = max(0, min(100, percent))
        self._notify(item)

    def begin_run(self) -> int:
        """Reset byte counters at the start of a run.

        The completed base is recomputed from items already done, so bytes
        sent by a failed attempt do not linger in the uploaded counter.

        Returns:
            The completed-bytes base.
        """
        self._completed_bytes = sum(
            item.size for item in self._items if item.status is ItemStatus.DONE
        )
        self._uploaded_bytes = self._completed_bytes
        return self._completed_bytes

    def record_progress(self, bytes_sent: int) -> None:
        """Set uploaded bytes to the completed base plus bytes sent for the active item."""
        self._uploaded_bytes = self._completed_bytes + bytes_sent

    def complete(self, item_id: str) -> QueueItem:
        """Mark an item done and fold its size into the completed base."""
        item = self.transition(item_id, ItemStatus.DONE)
        self._completed_bytes += item.size
        self._uploaded_bytes = self._completed_bytes
        return item

    def fail(self, item_id: str, error: str) -> QueueItem:
        """Mark an item failed and restore the counter to the completed base."""
        item = self.get(item_id)
        item.error = error
        self.transition(item_id, ItemStatus.FAILED)
        self._uploaded_bytes = self._completed_bytes
        return item
