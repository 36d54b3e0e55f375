"""Byte sources that can be queued for upload."""

from __future__ import annotations

import asyncio
import hashlib
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from dropctl.uploaders.constants import CHUNK_SIZE


@runtime_checkable
class ByteSource(Protocol):
    """A local byte source with a known size."""

    name: str
    size: int
    relative_path: str

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the source content in order."""
        ...


@dataclass
class LocalFileSource:
    """A file on the local filesystem.

    The size is captured once at construction, the way a browser File
    snapshots its size when it is picked.
    """

    path: Path
    relative_path: str = ""
    name: str = field(init=False)
    size: int = field(init=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.name = self.path.name
        self.size = self.path.stat().st_size

    async def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Read the file in chunks without blocking the event loop."""
        fh = await asyncio.to_thread(open, self.path, "rb")
        try:
            while True:
                chunk = await asyncio.to_thread(fh.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            fh.close()


@dataclass
class MemorySource:
    """An in-memory byte source."""

    name: str
    data: bytes
    relative_path: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    async def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        for offset in range(0, len(self.data), chunk_size):
            yield self.data[offset : offset + chunk_size]


async def sha256_of(source: ByteSource, chunk_size: int = CHUNK_SIZE) -> str:
    """Hex SHA-256 digest of a source's content."""
    digest = hashlib.sha256()
    async for chunk in source.iter_chunks(chunk_size):
        digest.update(chunk)
    return digest.hexdigest()
