from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Iterable, Iterator

from fiji_packager.errors import ArchiveStateError, BundlePathError

_DRIVE = re.compile(r"^[A-Za-z]:")


def normalize_path(path: str) -> str:
    """Root-relative posix form of ``path``; absolute or ``..`` paths are rejected."""
    candidate = path.replace("\\", "/")

    if candidate.startswith("/") or _DRIVE.match(candidate):
        raise BundlePathError(f"Absolute path not allowed in bundle: {path}")

    parts = [part for part in PurePosixPath(candidate).parts if part != "."]
    if ".." in parts:
        raise BundlePathError(f"Parent traversal not allowed in bundle: {path}")
    if not parts:
        raise BundlePathError(f"Empty path not allowed in bundle: {path!r}")

    return "/".join(parts)


class FileSet:
    """Insertion-ordered set of root-relative paths."""

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: dict[str, None] = {}
        self._frozen = False
        self.update(paths)

    def add(self, path: str) -> bool:
        if self._frozen:
            raise ArchiveStateError("File set can no longer change once writing started")
        normalized = normalize_path(path)
        if normalized in self._paths:
            return False
        self._paths[normalized] = None
        return True

    def update(self, paths: Iterable[str]) -> int:
        return sum(1 for path in paths if self.add(path))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"FileSet({list(self._paths)!r})"
