"""Sequential transfer of queued items.

Each item goes through initialize (ask the server for a transfer slot),
transfer (stream the bytes to the slot URL), and finalize (mark done and fold
its size into the completed-bytes base). Only one item is ever in flight.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from dropctl.core.exceptions import (
    BatchTransferError,
    CloseError,
    InitializeError,
    PortalRequestError,
    TransferError,
    TransferFailure,
)
from dropctl.core.logging import LogContext, get_audit_logger
from dropctl.core.validation import validate_chunk_size
from dropctl.models.portal import (
    ConflictPolicy,
    InitUploadRequest,
    InitUploadResponse,
    UploadCommitResponse,
)
from dropctl.models.progress import RunSummary
from dropctl.models.queue import ItemStatus, QueueItem
from dropctl.uploaders.constants import CHUNK_SIZE, STOP_ON_ERROR
from dropctl.uploaders.queue import UploadQueue
from dropctl.uploaders.sources import sha256_of

if TYPE_CHECKING:
    from dropctl.services.portal import PortalSession

logger = logging.getLogger(__name__)


def make_upload_id() -> str:
    """Globally unique ID for one transfer attempt."""
    return str(uuid.uuid4())


def progress_percent(bytes_sent: int, size: int) -> int:
    """Rounded completion percentage; an empty file counts as complete."""
    if size <= 0:
        return 100
    return min(100, round(bytes_sent / size * 100))


class TransferExecutor:
    """Drives queued items to done, one at a time, in enqueue order."""

    def __init__(
        self,
        session: "PortalSession",
        queue: UploadQueue,
        *,
        chunk_size: int = CHUNK_SIZE,
        stop_on_error: bool = STOP_ON_ERROR,
        checksum: bool = False,
    ) -> None:
        self.client = session.client
        self.session = session
        self.queue = queue
        self.chunk_size = validate_chunk_size(chunk_size)
        self.stop_on_error = stop_on_error
        self.checksum = checksum
        self._audit = get_audit_logger()

    async def run(self, policy: ConflictPolicy) -> RunSummary:
        """Transfer every item that is queued when the run starts.

        Args:
            policy: Conflict policy snapshot applied to every item of this run.

        Returns:
            Summary of the run.

        Raises:
            InitializeError: First item failure in stop-on-error mode.
            TransferError: First item failure in stop-on-error mode.
            BatchTransferError: Some items failed in continue-on-error mode.
        """
        items = self.queue.pending()
        summary = RunSummary()
        self.queue.begin_run()

        with LogContext(
            "upload run",
            logger,
            portal=self.session.portal_id,
            items=len(items),
            policy=policy.value,
        ) as ctx:
            for item in items:
                summary.attempted += 1
                try:
                    await self.transfer(item, policy)
                except TransferFailure as e:
                    summary.failed += 1
                    summary.errors.append(f"{e.relpath}: {e.message}")
                    if self.stop_on_error:
                        raise
                    ctx.warning("Continuing after failed item %s", e.relpath)
                    continue
                summary.succeeded += 1
                summary.bytes_sent += item.size
            summary.duration = ctx.elapsed

        if summary.failed:
            raise BatchTransferError(summary.succeeded, summary.failed, summary.errors)

        if not self.session.reusable:
            try:
                await self.session.close()
                summary.portal_closed = True
            except CloseError as e:
                logger.warning("Uploads complete but portal close failed: %s", e.message)
                summary.close_error = e.message
        return summary

    async def transfer(self, item: QueueItem, policy: ConflictPolicy) -> QueueItem:
        """Initialize, stream, and finalize one item.

        Raises:
            InitializeError: If no transfer slot was granted (item ends failed).
            TransferError: If the byte transfer failed (item ends failed).
        """
        self.queue.transition(item.id, ItemStatus.INITIALIZING)
        put_url = await self._initialize(item, policy)

        self.queue.transition(item.id, ItemStatus.UPLOADING)
        commit = await self._send(item, put_url)

        if commit is not None:
            item.final_relpath = commit.final_relpath or None
            item.server_sha256 = commit.server_sha256 or None
        self.queue.complete(item.id)
        logger.info("Uploaded %s (%d bytes)", item.relpath, item.size)
        self._audit.log_operation(
            "upload",
            portal=self.session.portal_id,
            relpath=item.relpath,
            details={"size": item.size, "final_relpath": item.final_relpath},
        )
        return item

    async def _initialize(self, item: QueueItem, policy: ConflictPolicy) -> str:
        upload_id = make_upload_id()
        try:
            client_sha256 = await sha256_of(item.source, self.chunk_size) if self.checksum else None
            request = InitUploadRequest(
                upload_id=upload_id,
                relpath=item.relpath,
                size=item.size,
                client_sha256=client_sha256,
                policy=policy,
            )
            data = await self.client.post_json(
                f"/api/portals/{self.session.portal_id}/uploads",
                request.to_payload(),
                headers=self.session.auth_headers(),
            )
            slot = InitUploadResponse.model_validate(data or {})
        except PortalRequestError as e:
            raise self._failed(item, InitializeError(item.relpath, e.message)) from e
        except OSError as e:
            raise self._failed(item, InitializeError(item.relpath, f"cannot read file: {e}")) from e
        except PydanticValidationError as e:
            raise self._failed(item, InitializeError(item.relpath, "invalid server reply")) from e

        item.upload_id = slot.upload_id or upload_id
        return slot.put_url

    async def _send(self, item: QueueItem, put_url: str) -> UploadCommitResponse | None:
        headers = {
            **self.session.auth_headers(),
            "Content-Type": "application/octet-stream",
            "Content-Length": str(item.size),
        }
        try:
            resp = await self.client.request("PUT", put_url, content=self._stream(item), headers=headers)
        except PortalRequestError as e:
            raise self._failed(item, TransferError(item.relpath, e.message)) from e
        except OSError as e:
            raise self._failed(item, TransferError(item.relpath, f"cannot read file: {e}")) from e

        if not resp.content:
            return None
        try:
            return UploadCommitResponse.model_validate(resp.json())
        except (ValueError, PydanticValidationError):
            logger.debug("Ignoring non-JSON commit reply for %s", item.relpath)
            return None

    async def _stream(self, item: QueueItem) -> AsyncIterator[bytes]:
        sent = 0
        async for chunk in item.source.iter_chunks(self.chunk_size):
            yield chunk
            sent += len(chunk)
            self.queue.record_progress(sent)
            self.queue.set_progress(item.id, progress_percent(sent, item.size))

    def _failed(self, item: QueueItem, error: TransferFailure) -> TransferFailure:
        self.queue.fail(item.id, error.message)
        logger.error("Upload of %s failed: %s", item.relpath, error.message)
        self._audit.log_operation(
            "upload",
            portal=self.session.portal_id,
            relpath=item.relpath,
            success=False,
            details={"error": error.message},
        )
        return error
