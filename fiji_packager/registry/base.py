from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from fiji_packager.errors import RegistryError


class FileStatus(str, Enum):
    INSTALLED = "installed"
    MODIFIED = "modified"
    NOT_INSTALLED = "not-installed"
    LOCAL_ONLY = "local-only"


class FileRecord(BaseModel):
    filename: str = Field(
        ...,
        description="Root-relative path as recorded by the registry",
    )

    platforms: frozenset[str] = Field(
        default_factory=frozenset,
        description="Platforms the file is restricted to; empty for all",
    )

    executable: bool = Field(
        default=False,
        description="Whether the registry marks the file as executable",
    )

    checksum: Optional[str] = Field(
        default=None,
        description="Checksum published by the update site",
    )

    local_filename: Optional[str] = Field(
        default=None,
        description="Root-relative path of the installed copy (if any)",
    )

    local_checksum: Optional[str] = Field(
        default=None,
        description="SHA-1 of the installed copy",
    )

    status: FileStatus = FileStatus.NOT_INSTALLED

    def is_for_platform(self, platform: str) -> bool:
        return platform in self.platforms

    @property
    def path(self) -> str:
        return self.local_filename or self.filename


def is_for_platforms(record: FileRecord, platforms: Iterable[str]) -> bool:
    requested = list(platforms)
    if not requested or not record.platforms:
        return True
    return any(record.is_for_platform(platform) for platform in requested)


def checksum_file(path: Path) -> str:
    digest = hashlib.sha1()
    try:
        with path.open("rb") as stream:
            for chunk in iter(lambda: stream.read(65536), b""):
                digest.update(chunk)
    except OSError as exc:
        raise RegistryError(f"Failed to checksum {path}: {exc}") from exc
    return digest.hexdigest()


class RegistryAdapter(ABC):
    """Source of the files a bundle ships, besides bootstrap and runtime files."""

    name: str = ""

    def __init__(self, root: Path) -> None:
        self.root = root

    @abstractmethod
    def records(self) -> list[FileRecord]:
        """Installed records in the registry's path order."""

    def get_file_list(self, platforms: Iterable[str] = ()) -> list[str]:
        requested = list(platforms)
        files: list[str] = []
        seen: set[str] = set()

        for record in self.records():
            if not is_for_platforms(record, requested):
                continue
            if record.path in seen:
                continue
            seen.add(record.path)
            files.append(record.path)

        return files
