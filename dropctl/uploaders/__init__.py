"""Upload machinery for dropctl.

This module provides the pieces the upload service composes:
- Byte sources and drag-and-drop style entry collection
- The upload queue with its byte counters
- The sequential transfer executor
- Throughput sampling

These are internal implementation details. Use `UploadService` from
`dropctl.services.uploads` as the public API.
"""

from dropctl.uploaders.collector import (
    LocalEntry,
    collect_entries,
    collect_paths,
    collect_selection,
)
from dropctl.uploaders.constants import (
    CHUNK_SIZE,
    LISTING_BATCH_SIZE,
    SAMPLE_INTERVAL,
    STOP_ON_ERROR,
)
from dropctl.uploaders.executor import TransferExecutor, progress_percent
from dropctl.uploaders.queue import UploadQueue
from dropctl.uploaders.sources import ByteSource, LocalFileSource, MemorySource
from dropctl.uploaders.throughput import ThroughputSampler

__all__ = [
    # Constants
    "CHUNK_SIZE",
    "LISTING_BATCH_SIZE",
    "SAMPLE_INTERVAL",
    "STOP_ON_ERROR",
    # Sources and collection
    "ByteSource",
    "LocalFileSource",
    "MemorySource",
    "LocalEntry",
    "collect_entries",
    "collect_paths",
    "collect_selection",
    # Queue and transfer
    "UploadQueue",
    "TransferExecutor",
    "progress_percent",
    "ThroughputSampler",
]
