from __future__ import annotations

import contextlib
import gzip
import tarfile
import tempfile
import time
from typing import BinaryIO, Optional

from fiji_packager.archive.backend import ArchiveBackend
from fiji_packager.errors import CodecUnavailableError

# entries larger than this are spooled to disk until the header can be written
SPOOL_LIMIT = 8 * 1024 * 1024


class TarBackend(ArchiveBackend):
    """Plain tar. Compressed variants only change the filter around the sink."""

    extension = ".tar"

    def __init__(self) -> None:
        super().__init__()
        self._filter: Optional[BinaryIO] = None
        self._compressed = False
        self._tar: Optional[tarfile.TarFile] = None
        self._info: Optional[tarfile.TarInfo] = None
        self._buffer = None

    def _wrap(self, sink: BinaryIO) -> BinaryIO:
        return sink

    def _open(self, sink: BinaryIO) -> None:
        self._filter = self._wrap(sink)
        self._compressed = self._filter is not sink
        self._tar = tarfile.open(
            fileobj=self._filter,
            mode="w|",
            format=tarfile.PAX_FORMAT,
        )

    def _put_entry(
        self, name: str, executable: bool, size: int, mtime: Optional[float]
    ) -> None:
        info = tarfile.TarInfo(name)
        info.type = tarfile.REGTYPE
        info.size = size
        info.mode = self.mode_for(executable)
        info.mtime = int(time.time() if mtime is None else mtime)
        self._info = info
        self._buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_LIMIT)

    def _write(self, data: bytes) -> None:
        self._buffer.write(data)

    def _close_entry(self) -> None:
        info, self._info = self._info, None
        buffer, self._buffer = self._buffer, None
        try:
            buffer.seek(0)
            self._tar.addfile(info, buffer)
        finally:
            buffer.close()

    def _close(self) -> None:
        archive, self._tar = self._tar, None
        archive.close()
        # closing a compressing filter flushes its trailer but leaves the sink open
        compressor, self._filter = self._filter, None
        if self._compressed:
            compressor.close()

    def abort(self) -> None:
        # the output is discarded, so failures while releasing handles do not matter
        archive, self._tar = self._tar, None
        compressor, self._filter = self._filter, None
        buffer, self._buffer = self._buffer, None
        if buffer is not None:
            buffer.close()
        if archive is not None:
            with contextlib.suppress(OSError, ValueError):
                archive.close()
        if compressor is not None and self._compressed:
            with contextlib.suppress(OSError, ValueError):
                compressor.close()
        super().abort()


class TarGzBackend(TarBackend):
    extension = ".tar.gz"

    def _wrap(self, sink: BinaryIO) -> BinaryIO:
        return gzip.GzipFile(filename="", mode="wb", fileobj=sink)


class TarBz2Backend(TarBackend):
    extension = ".tar.bz2"

    def __init__(self) -> None:
        self._bz2 = load_bz2()
        super().__init__()

    def _wrap(self, sink: BinaryIO) -> BinaryIO:
        return self._bz2.BZ2File(sink, mode="wb")


def load_bz2():
    try:
        import bz2
    except ImportError as exc:
        raise CodecUnavailableError(
            "The bzip2 codec is not available in this Python installation"
        ) from exc
    return bz2
