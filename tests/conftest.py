from __future__ import annotations

import errno
import gzip
from pathlib import Path
from typing import Iterable, Optional

import pytest

from fiji_packager.archive.backend import ArchiveBackend
from fiji_packager.registry.base import FileRecord, FileStatus, RegistryAdapter


class StaticRegistry(RegistryAdapter):
    """Registry returning fixed records, in the order given."""

    name = "static"

    def __init__(self, root: Path, records: Iterable[FileRecord] = ()) -> None:
        super().__init__(root)
        self._records = list(records)
        self.calls = 0

    @classmethod
    def of(cls, root: Path, *paths: str) -> StaticRegistry:
        return cls(
            root,
            [
                FileRecord(filename=path, local_filename=path, status=FileStatus.INSTALLED)
                for path in paths
            ],
        )

    def records(self) -> list[FileRecord]:
        self.calls += 1
        return list(self._records)


class RecordingBackend(ArchiveBackend):
    """In-memory backend; names containing ``too_long`` fail like an over-long path."""

    extension = ".test"

    def __init__(self, fail_on_write: Optional[str] = None) -> None:
        super().__init__()
        self.entries: list[tuple[str, bool, int, bytes]] = []
        self._current: Optional[list] = None
        self._fail_on_write = fail_on_write
        self.closed = False

    def _open(self, sink) -> None:
        pass

    def _put_entry(self, name, executable, size, mtime) -> None:
        if "too_long" in name:
            raise OSError(errno.ENAMETOOLONG, "File name too long", name)
        self._current = [name, executable, size, b""]

    def _write(self, data: bytes) -> None:
        if self._fail_on_write and self._current[0].endswith(self._fail_on_write):
            raise OSError(errno.ENOSPC, "No space left on device")
        self._current[3] += data

    def _close_entry(self) -> None:
        self.entries.append(tuple(self._current))
        self._current = None

    def _close(self) -> None:
        self.closed = True

    @property
    def names(self) -> list[str]:
        return [entry[0] for entry in self.entries]


class RecordingProgress:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def set_title(self, title: str) -> None:
        self.events.append(("title", title))

    def set_count(self, count: int, total: int) -> None:
        self.events.append(("count", count, total))

    def add_item(self, item: str) -> None:
        self.events.append(("item", item))

    def item_done(self, item: str) -> None:
        self.events.append(("done-item", item))

    def done(self) -> None:
        self.events.append(("done",))


def write_file(root: Path, relative: str, data: bytes = b"data", executable: bool = False) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    path.chmod(0o755 if executable else 0o644)
    return path


def write_database(root: Path, body: str) -> Path:
    path = root / "db.xml.gz"
    xml = f'<?xml version="1.0" encoding="UTF-8"?>\n<pluginRecords>\n{body}\n</pluginRecords>\n'
    with gzip.open(path, "wb") as stream:
        stream.write(xml.encode("utf-8"))
    return path


@pytest.fixture
def bundle(tmp_path: Path) -> Path:
    root = tmp_path / "Fiji.app"
    root.mkdir()
    return root
