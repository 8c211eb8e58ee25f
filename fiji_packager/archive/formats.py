from __future__ import annotations

from enum import Enum
from pathlib import Path

from fiji_packager.archive.backend import ArchiveBackend
from fiji_packager.archive.tar import TarBackend, TarBz2Backend, TarGzBackend
from fiji_packager.archive.zip import ZipBackend
from fiji_packager.errors import UnsupportedFormatError


class ArchiveFormat(str, Enum):
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"


SUFFIXES: tuple[tuple[str, ArchiveFormat], ...] = (
    (".zip", ArchiveFormat.ZIP),
    (".tar", ArchiveFormat.TAR),
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tgz", ArchiveFormat.TAR_GZ),
    (".tar.bz2", ArchiveFormat.TAR_BZ2),
    (".tbz", ArchiveFormat.TAR_BZ2),
)

BACKENDS: dict[ArchiveFormat, type[ArchiveBackend]] = {
    ArchiveFormat.ZIP: ZipBackend,
    ArchiveFormat.TAR: TarBackend,
    ArchiveFormat.TAR_GZ: TarGzBackend,
    ArchiveFormat.TAR_BZ2: TarBz2Backend,
}


def format_for_path(path: Path | str) -> ArchiveFormat:
    name = Path(path).name.lower()
    for suffix, archive_format in SUFFIXES:
        if name.endswith(suffix):
            return archive_format
    raise UnsupportedFormatError(f"Unsupported archive format: {path}")


def backend_for_format(archive_format: ArchiveFormat) -> ArchiveBackend:
    return BACKENDS[archive_format]()


def backend_for_path(path: Path | str) -> ArchiveBackend:
    return backend_for_format(format_for_path(path))
