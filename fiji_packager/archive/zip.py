from __future__ import annotations

import contextlib
import stat
import time
import zipfile
from typing import BinaryIO, Optional

from fiji_packager.archive.backend import ArchiveBackend
from fiji_packager.errors import EntryNameTooLongError

# the local header stores the name length in an unsigned short
MAX_NAME_LENGTH = 0xFFFF
UNIX_SYSTEM = 3


class ZipBackend(ArchiveBackend):
    extension = ".zip"

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        super().__init__()
        self._compression = compression
        self._zip: Optional[zipfile.ZipFile] = None
        self._stream: Optional[BinaryIO] = None

    def _open(self, sink: BinaryIO) -> None:
        self._zip = zipfile.ZipFile(sink, mode="w", compression=self._compression)

    def _put_entry(
        self, name: str, executable: bool, size: int, mtime: Optional[float]
    ) -> None:
        if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
            raise EntryNameTooLongError(f"File name too long: {name}")

        info = zipfile.ZipInfo(name, date_time=_zip_datetime(mtime))
        info.compress_type = self._compression
        info.create_system = UNIX_SYSTEM
        info.file_size = size
        info.external_attr = (stat.S_IFREG | self.mode_for(executable)) << 16

        self._stream = self._zip.open(
            info,
            mode="w",
            force_zip64=size > zipfile.ZIP64_LIMIT,
        )

    def _write(self, data: bytes) -> None:
        self._stream.write(data)

    def _close_entry(self) -> None:
        stream, self._stream = self._stream, None
        stream.close()

    def _close(self) -> None:
        archive, self._zip = self._zip, None
        archive.close()

    def abort(self) -> None:
        # the output is discarded, so failures while releasing handles do not matter
        stream, self._stream = self._stream, None
        archive, self._zip = self._zip, None
        if stream is not None:
            with contextlib.suppress(OSError, RuntimeError, ValueError):
                stream.close()
        if archive is not None:
            with contextlib.suppress(OSError, RuntimeError, ValueError):
                archive.close()
        super().abort()


def _zip_datetime(mtime: Optional[float]) -> tuple[int, int, int, int, int, int]:
    # ZIP timestamps cannot represent dates before 1980.
    t = time.localtime(mtime)
    if t.tm_year < 1980:
        return (1980, 1, 1, 0, 0, 0)
    return (t.tm_year, t.tm_mon, t.tm_mday, t.tm_hour, t.tm_min, t.tm_sec)
