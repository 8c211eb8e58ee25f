from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO, Optional

from fiji_packager.errors import (
    ArchiveStateError,
    ArchiveWriteError,
    EntryNameTooLongError,
)
from fiji_packager.utils.fs import is_name_too_long

CHUNK_SIZE = 16384


class ArchiveBackend(ABC):
    """Write-only entry stream over one archive container format.

    Callers drive a backend as ``open`` -> (``put_entry`` -> ``write``* ->
    ``close_entry``)* -> ``close``. Only one entry can be open at a time.
    """

    extension: str = ""

    def __init__(self) -> None:
        self._sink: Optional[BinaryIO] = None
        self._entry: Optional[str] = None
        self._declared_size = 0
        self._written = 0

    @property
    def is_open(self) -> bool:
        return self._sink is not None

    @property
    def current_entry(self) -> Optional[str]:
        return self._entry

    def open(self, sink: BinaryIO) -> None:
        if self._sink is not None:
            raise ArchiveStateError("Archive is already open")
        self._sink = sink
        try:
            self._open(sink)
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to open archive: {exc}") from exc

    def put_entry(
        self,
        name: str,
        executable: bool,
        size: int,
        mtime: Optional[float] = None,
    ) -> None:
        self._require_open()
        if self._entry is not None:
            raise ArchiveStateError(
                f"Cannot start '{name}' while '{self._entry}' is still open"
            )
        try:
            self._put_entry(name, executable, size, mtime)
        except OSError as exc:
            if is_name_too_long(exc):
                raise EntryNameTooLongError(f"File name too long: {name}") from exc
            raise ArchiveWriteError(f"Failed to add entry {name}: {exc}") from exc
        self._entry = name
        self._declared_size = size
        self._written = 0

    def write(self, data: bytes) -> None:
        if self._entry is None:
            raise ArchiveStateError("No open entry to write to")
        try:
            self._write(data)
        except OSError as exc:
            raise ArchiveWriteError(
                f"Failed to write entry {self._entry}: {exc}"
            ) from exc
        self._written += len(data)

    def write_stream(self, source: BinaryIO) -> None:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            self.write(chunk)

    def close_entry(self) -> None:
        if self._entry is None:
            raise ArchiveStateError("No open entry to close")
        name, self._entry = self._entry, None
        if self._written != self._declared_size:
            raise ArchiveWriteError(
                f"Entry {name} declared {self._declared_size} bytes "
                f"but {self._written} were written"
            )
        try:
            self._close_entry()
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to finish entry {name}: {exc}") from exc

    def close(self) -> None:
        self._require_open()
        if self._entry is not None:
            raise ArchiveStateError(
                f"Cannot close archive while '{self._entry}' is still open"
            )
        # the sink stays attached until finalized so that abort() can release it
        try:
            self._close()
            self._sink.close()
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to finalize archive: {exc}") from exc
        self._sink = None

    def abort(self) -> None:
        """Release the sink without finalizing; the output is left invalid."""
        sink, self._sink = self._sink, None
        self._entry = None
        if sink is not None and not sink.closed:
            sink.close()

    def _require_open(self) -> None:
        if self._sink is None:
            raise ArchiveStateError("Archive is not open")

    @staticmethod
    def mode_for(executable: bool) -> int:
        return 0o755 if executable else 0o644

    @abstractmethod
    def _open(self, sink: BinaryIO) -> None: ...

    @abstractmethod
    def _put_entry(
        self, name: str, executable: bool, size: int, mtime: Optional[float]
    ) -> None: ...

    @abstractmethod
    def _write(self, data: bytes) -> None: ...

    @abstractmethod
    def _close_entry(self) -> None: ...

    @abstractmethod
    def _close(self) -> None: ...
