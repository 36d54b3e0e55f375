"""Tests for flattening dropped files and folders."""

from __future__ import annotations

import asyncio
from pathlib import Path

from dropctl.core.exceptions import EntryReadError
from dropctl.uploaders.collector import (
    LocalEntry,
    collect_entries,
    collect_paths,
    collect_selection,
    read_directory_entries,
)
from dropctl.uploaders.sources import LocalFileSource, MemorySource


class FakeReader:
    """Reader returning fixed pages, then an empty batch (or an error)."""

    def __init__(self, pages: list[list], error: Exception | None = None):
        self.pages = list(pages)
        self.error = error
        self.calls = 0

    async def read_entries(self) -> list:
        self.calls += 1
        if self.pages:
            return self.pages.pop(0)
        if self.error is not None:
            raise self.error
        return []


class FakeEntry:
    """Minimal in-memory entry in the drag-and-drop shape."""

    def __init__(
        self,
        name: str,
        full_path: str,
        *,
        data: bytes | None = None,
        children: list | None = None,
        reader: FakeReader | None = None,
        unreadable: bool = False,
    ):
        self.name = name
        self.full_path = full_path
        self._data = data
        self._reader = reader or FakeReader([children] if children else [])
        self._unreadable = unreadable

    @property
    def is_file(self) -> bool:
        return self._data is not None

    @property
    def is_directory(self) -> bool:
        return self._data is None and not self._unreadable

    async def file(self) -> MemorySource:
        if self._unreadable:
            raise EntryReadError(self.full_path, "gone")
        return MemorySource(self.name, self._data or b"")

    def create_reader(self) -> FakeReader:
        return self._reader


def _relpaths(candidates) -> list[str]:
    return [c.relpath for c in candidates]


class TestCollectSelection:
    """Tests for flat file selections."""

    def test_uses_relative_path_hint(self):
        sources = [
            MemorySource("b.txt", b"1", relative_path="a/b.txt"),
            MemorySource("c.txt", b"22"),
        ]
        assert _relpaths(collect_selection(sources)) == ["a/b.txt", "c.txt"]


class TestEntryTraversal:
    """Tests for recursive entry traversal."""

    def test_nested_folder(self):
        tree = FakeEntry(
            "a",
            "/a",
            children=[
                FakeEntry("b.txt", "/a/b.txt", data=b"b"),
                FakeEntry("c", "/a/c", children=[FakeEntry("d.txt", "/a/c/d.txt", data=b"d")]),
            ],
        )
        result = asyncio.run(collect_entries([tree]))
        assert _relpaths(result) == ["a/b.txt", "a/c/d.txt"]

    def test_reader_drained_across_pages(self):
        pages = [
            [FakeEntry(f"f{i}", f"/big/f{i}", data=b"x") for i in range(100)],
            [FakeEntry(f"g{i}", f"/big/g{i}", data=b"x") for i in range(100)],
            [FakeEntry("h", "/big/h", data=b"x")],
        ]
        reader = FakeReader(pages)
        children = asyncio.run(read_directory_entries(reader))
        assert len(children) == 201
        assert reader.calls == 4

    def test_listing_error_keeps_earlier_pages(self):
        reader = FakeReader([[FakeEntry("a", "/d/a", data=b"x")]], error=OSError("denied"))
        children = asyncio.run(read_directory_entries(reader))
        assert [c.name for c in children] == ["a"]

    def test_unreadable_entries_are_skipped(self):
        entries = [
            FakeEntry("ok.txt", "/ok.txt", data=b"ok"),
            FakeEntry("bad.txt", "/bad.txt", unreadable=True),
        ]
        result = asyncio.run(collect_entries(entries))
        assert _relpaths(result) == ["ok.txt"]

    def test_missing_full_path_falls_back_to_name(self):
        result = asyncio.run(collect_entries([FakeEntry("x.txt", "", data=b"x")]))
        assert _relpaths(result) == ["x.txt"]


class TestLocalEntries:
    """Tests for local filesystem entries."""

    def test_collect_folder(self, sample_tree: Path):
        result = asyncio.run(collect_paths([sample_tree]))
        assert _relpaths(result) == ["a/b.txt", "a/c/d.txt"]
        assert [c.source.size for c in result] == [3, 4]

    def test_collect_single_file(self, sample_tree: Path):
        result = asyncio.run(collect_paths([sample_tree / "b.txt"]))
        assert _relpaths(result) == ["b.txt"]
        assert isinstance(result[0].source, LocalFileSource)

    def test_small_listing_pages(self, temp_dir: Path):
        for name in ("1", "2", "3", "4", "5"):
            (temp_dir / f"{name}.bin").write_bytes(b"x")
        entry = LocalEntry(temp_dir, full_path="/batch", batch_size=2)
        result = asyncio.run(collect_entries([entry]))
        assert _relpaths(result) == [f"batch/{n}.bin" for n in "12345"]

    def test_broken_symlink_is_skipped(self, temp_dir: Path):
        (temp_dir / "real.txt").write_bytes(b"r")
        (temp_dir / "dangling").symlink_to(temp_dir / "missing")
        result = asyncio.run(collect_entries([LocalEntry(temp_dir, full_path="/d")]))
        assert _relpaths(result) == ["d/real.txt"]

    def test_file_source_reads_chunks(self, sample_tree: Path):
        source = LocalFileSource(sample_tree / "c" / "d.txt")

        async def read_all() -> list[bytes]:
            return [chunk async for chunk in source.iter_chunks(3)]

        assert asyncio.run(read_all()) == [b"dee", b"!"]
