"""Flatten dropped files and folders into upload candidates.

Entries follow the shape of the browser FileSystemEntry API: each entry is
either a file (materialised with ``file()``) or a directory (listed with a
paginated reader from ``create_reader()``). ``LocalEntry`` implements the
same shape over the local filesystem so that paths given on the command line
go through exactly the same traversal as a drag-and-drop payload.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from dropctl.core.exceptions import EntryReadError
from dropctl.core.validation import strip_leading_slash
from dropctl.models.queue import QueueCandidate
from dropctl.uploaders.constants import LISTING_BATCH_SIZE
from dropctl.uploaders.sources import ByteSource, LocalFileSource

logger = logging.getLogger(__name__)


# =============================================================================
# Entry Protocol
# =============================================================================


class DirectoryReader(Protocol):
    """Paginated directory listing; an empty batch means exhausted."""

    async def read_entries(self) -> list["Entry"]: ...


class Entry(Protocol):
    """A dropped file or directory."""

    name: str
    full_path: str

    @property
    def is_file(self) -> bool: ...

    @property
    def is_directory(self) -> bool: ...

    async def file(self) -> ByteSource: ...

    def create_reader(self) -> DirectoryReader: ...


# =============================================================================
# Local Filesystem Entries
# =============================================================================


class LocalDirectoryReader:
    """Lists a local directory in fixed-size pages, in name order."""

    def __init__(self, entry: "LocalEntry", batch_size: int = LISTING_BATCH_SIZE) -> None:
        self._entry = entry
        self._batch_size = batch_size
        self._children: list[Path] | None = None
        self._offset = 0

    async def read_entries(self) -> list["LocalEntry"]:
        if self._children is None:
            self._children = await asyncio.to_thread(_list_dir, self._entry.path)

        batch = self._children[self._offset : self._offset + self._batch_size]
        self._offset += len(batch)
        prefix = self._entry.full_path.rstrip("/")
        return [
            LocalEntry(child, full_path=f"{prefix}/{child.name}", batch_size=self._batch_size)
            for child in batch
        ]


def _list_dir(path: Path) -> list[Path]:
    with os.scandir(path) as it:
        return sorted((Path(e.path) for e in it), key=lambda p: p.name)


class LocalEntry:
    """A local file or directory presented as a dropped entry."""

    def __init__(
        self,
        path: Path,
        *,
        full_path: str | None = None,
        batch_size: int = LISTING_BATCH_SIZE,
    ) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self.full_path = full_path if full_path is not None else f"/{self.name}"
        self._batch_size = batch_size

    def __repr__(self) -> str:
        return f"LocalEntry({self.full_path!r})"

    @property
    def is_file(self) -> bool:
        # Broken symlinks are neither files nor directories
        return self.path.is_file()

    @property
    def is_directory(self) -> bool:
        return self.path.is_dir()

    async def file(self) -> LocalFileSource:
        try:
            return await asyncio.to_thread(LocalFileSource, self.path)
        except OSError as e:
            raise EntryReadError(str(self.path), e.strerror or str(e)) from e

    def create_reader(self) -> LocalDirectoryReader:
        return LocalDirectoryReader(self, self._batch_size)


# =============================================================================
# Collection
# =============================================================================


def collect_selection(sources: Iterable[ByteSource]) -> list[QueueCandidate]:
    """Turn a flat file selection into candidates.

    The destination path is the source's relative-path hint when present,
    otherwise its base name.
    """
    return [
        QueueCandidate(source=source, relpath=source.relative_path or source.name)
        for source in sources
    ]


async def read_directory_entries(reader: DirectoryReader) -> list[Entry]:
    """Drain a paginated reader until it returns an empty batch.

    A failing page ends the listing; children read before it are kept.
    """
    entries: list[Entry] = []
    while True:
        try:
            batch = await reader.read_entries()
        except (OSError, EntryReadError) as e:
            logger.warning("Directory listing stopped early: %s", e)
            break
        if not batch:
            break
        entries.extend(batch)
    return entries


async def read_entry_files(entry: Entry) -> list[QueueCandidate]:
    """Collect every file below an entry, in discovery order."""
    if entry.is_file:
        try:
            source = await entry.file()
        except (OSError, EntryReadError) as e:
            logger.warning("Skipping unreadable file %s: %s", entry.full_path, e)
            return []
        relpath = strip_leading_slash(entry.full_path or "")
        return [QueueCandidate(source=source, relpath=relpath or source.relative_path or source.name)]

    if entry.is_directory:
        children = await read_directory_entries(entry.create_reader())
        files: list[QueueCandidate] = []
        for child in children:
            files.extend(await read_entry_files(child))
        return files

    logger.debug("Skipping entry that is neither file nor directory: %s", entry.full_path)
    return []


async def collect_entries(entries: Sequence[Entry]) -> list[QueueCandidate]:
    """Flatten a drag-and-drop payload into candidates."""
    files: list[QueueCandidate] = []
    for entry in entries:
        files.extend(await read_entry_files(entry))
    return files


async def collect_paths(paths: Iterable[Path | str]) -> list[QueueCandidate]:
    """Collect local files and folders as if they were dropped together.

    Each path becomes a top-level entry named after its last component, so
    ``photos/`` yields ``photos/...`` destination paths.
    """
    entries = [LocalEntry(Path(p).expanduser().resolve()) for p in paths]
    return await collect_entries(entries)
