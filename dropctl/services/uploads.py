"""Upload orchestration for a single portal.

``UploadService`` owns every piece of shared mutable state for a portal
page: the queue and its byte counters, the conflict set, the current policy
choice, the running flag, the sampler, and the status line. Event handlers
(add files, toggle policy, start a run) go through its methods; the running
flag gates re-entrant runs instead of a lock.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Optional

from dropctl.core.client import PortalClient
from dropctl.core.exceptions import (
    BatchTransferError,
    ClaimError,
    PortalStateError,
    PreflightError,
    TransferFailure,
)
from dropctl.models.portal import ConflictPolicy, PreflightConflict
from dropctl.models.progress import RunSummary, StatusMessage, StatusTone
from dropctl.models.queue import QueueCandidate, QueueItem
from dropctl.uploaders.constants import CHUNK_SIZE, SAMPLE_INTERVAL, STOP_ON_ERROR
from dropctl.uploaders.executor import TransferExecutor
from dropctl.uploaders.queue import UploadQueue
from dropctl.uploaders.throughput import ThroughputSampler

from .portal import PortalSession
from .preflight import PreflightChecker

logger = logging.getLogger(__name__)

StatusListener = Callable[[StatusMessage], None]

DEFAULT_STATUS = StatusMessage("Preparing portal...", StatusTone.INFO)


class UploadService:
    """Claims a portal, queues files, and uploads them one at a time."""

    def __init__(
        self,
        client: PortalClient,
        portal_id: str,
        *,
        chunk_size: int = CHUNK_SIZE,
        sample_interval: float = SAMPLE_INTERVAL,
        stop_on_error: bool = STOP_ON_ERROR,
        checksum: bool = False,
        sampler: Optional[ThroughputSampler] = None,
        on_status: Optional[StatusListener] = None,
    ) -> None:
        self.session = PortalSession(client, portal_id)
        self.queue = UploadQueue()
        self.checker = PreflightChecker(self.session)
        self.executor = TransferExecutor(
            self.session,
            self.queue,
            chunk_size=chunk_size,
            stop_on_error=stop_on_error,
            checksum=checksum,
        )
        self.sampler = sampler or ThroughputSampler(sample_interval)
        self._policy = ConflictPolicy.OVERWRITE
        self._running = False
        self._status = DEFAULT_STATUS
        self._status_listeners: list[StatusListener] = []
        if on_status is not None:
            self._status_listeners.append(on_status)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def portal_id(self) -> str:
        return self.session.portal_id

    @property
    def claimed(self) -> bool:
        return self.session.claimed

    @property
    def running(self) -> bool:
        return self._running

    @property
    def policy(self) -> ConflictPolicy:
        """Conflict policy that the next run will use."""
        return self._policy

    @property
    def status(self) -> StatusMessage:
        return self._status

    @property
    def items(self) -> list[QueueItem]:
        return self.queue.items

    @property
    def conflicts(self) -> list[PreflightConflict]:
        return self.checker.conflicts

    @property
    def conflict_message(self) -> str:
        return self.checker.describe(self._policy)

    @property
    def total_bytes(self) -> int:
        return self.queue.total_bytes

    @property
    def uploaded_bytes(self) -> int:
        return self.queue.uploaded_bytes

    @property
    def speed_bps(self) -> float:
        return self.sampler.rate

    @property
    def queued_count(self) -> int:
        return self.queue.queued_count

    @property
    def overall_progress(self) -> int:
        return self.queue.overall_progress

    # =========================================================================
    # Status Line
    # =========================================================================

    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def _set_status(self, message: str, tone: StatusTone = StatusTone.INFO) -> None:
        self._status = StatusMessage(message, tone)
        for listener in list(self._status_listeners):
            listener(self._status)

    # =========================================================================
    # Operations
    # =========================================================================

    async def claim(self) -> PortalSession:
        """Claim the portal, then check any files queued before the claim.

        Raises:
            ClaimError: If the portal cannot be claimed; the session stays unclaimed.
        """
        if self.session.claimed:
            return self.session

        self._set_status("Claiming portal...")
        try:
            await self.session.claim()
        except ClaimError as e:
            self._set_status(e.message, StatusTone.ERROR)
            raise

        self._policy = self.session.policy
        self._set_status("Portal ready. Drop or click to add files.", StatusTone.OK)
        await self._refresh_conflicts()
        return self.session

    async def add(self, candidates: Iterable[QueueCandidate]) -> list[QueueItem]:
        """Queue candidates and refresh the advisory conflict list.

        Files can be queued before the claim and during a run; neither
        triggers a preflight request.
        """
        added = self.queue.add(candidates)
        if added:
            await self._refresh_conflicts()
        return added

    def set_policy(self, policy: ConflictPolicy) -> None:
        """Choose how conflicts are resolved by the next run.

        Raises:
            PortalStateError: If a run is active.
        """
        if self._running:
            raise PortalStateError(self.portal_id, "Cannot change policy while uploading")
        self._policy = ConflictPolicy(policy)

    async def preflight(self) -> list[PreflightConflict]:
        """Check currently queued items for conflicts.

        Raises:
            PreflightError: If the check fails.
        """
        return await self.checker.check(self.queue.pending(), running=self._running)

    async def run(self) -> Optional[RunSummary]:
        """Upload every queued item.

        Returns None without doing anything when a run is already active, the
        portal is unclaimed, or nothing is queued.

        Raises:
            PreflightError: If the pre-run conflict check fails; nothing is sent.
            InitializeError: If a transfer slot is refused (stop-on-error mode).
            TransferError: If a byte transfer fails (stop-on-error mode).
            BatchTransferError: If some items failed (continue-on-error mode).
        """
        if self._running or not self.session.claimed or self.session.closed:
            return None
        pending = self.queue.pending()
        if not pending:
            return None

        self._running = True
        try:
            try:
                await self.checker.check(pending)
            except PreflightError as e:
                self._set_status(e.message, StatusTone.ERROR)
                raise

            policy = self._policy
            async with self.sampler.sampling(lambda: self.queue.uploaded_bytes):
                summary = await self.executor.run(policy)
        except TransferFailure as e:
            self._set_status(f"Upload failed: {e.message}", StatusTone.ERROR)
            raise
        except BatchTransferError as e:
            self._set_status(e.message, StatusTone.ERROR)
            raise
        finally:
            self._running = False

        if summary.close_error:
            self._set_status(
                f"Uploads complete. Portal close failed: {summary.close_error}", StatusTone.WARN
            )
        elif summary.portal_closed:
            self._set_status("All uploads complete. Portal closed.", StatusTone.OK)
        else:
            self._set_status("All uploads complete. Portal remains open.", StatusTone.OK)
        return summary

    async def _refresh_conflicts(self) -> None:
        """Opportunistic preflight; failures are logged, not surfaced."""
        try:
            await self.checker.check(self.queue.pending(), running=self._running)
        except PreflightError as e:
            logger.warning("Background conflict check failed: %s", e.message)
