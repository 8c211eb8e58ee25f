"""Registry backed by the update-site database (``db.xml.gz``).

The database lists every file the updater manages as a ``<plugin>`` element::

    <pluginRecords>
      <plugin update-site="ImageJ" filename="jars/ij.jar">
        <platform>linux64</platform>
        <version checksum="..." timestamp="..." filesize="..."/>
      </plugin>
    </pluginRecords>

Records are reconciled with the installation before use: the local copy is
located (versioned jars included), checksummed and records without a local
copy are dropped. Installed files the database does not list are added
as local-only records.
"""

from __future__ import annotations

import gzip
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional
from xml.etree import ElementTree

from fiji_packager.errors import RegistryError
from fiji_packager.registry.base import (
    FileRecord,
    FileStatus,
    RegistryAdapter,
    checksum_file,
)
from fiji_packager.registry.legacy import local_record, scan_managed_files
from fiji_packager.utils.fs import list_visible

logger = logging.getLogger(__name__)

DATABASE_NAME = "db.xml.gz"


class FilesCollection:
    def __init__(self, root: Path, database: str = DATABASE_NAME) -> None:
        self.root = root
        self.database = root / database
        self._records: list[FileRecord] = []

    def read(self) -> FilesCollection:
        try:
            with gzip.open(self.database, "rb") as stream:
                tree = ElementTree.parse(stream)
        except FileNotFoundError as exc:
            raise RegistryError(
                f"Update database not found: {self.database}"
            ) from exc
        except (OSError, EOFError, ElementTree.ParseError) as exc:
            raise RegistryError(
                f"Failed to read update database {self.database}: {exc}"
            ) from exc

        self._records = [_parse_plugin(element) for element in tree.getroot().iter("plugin")]
        logger.debug("Read %d records from %s", len(self._records), self.database)
        return self

    def update_from_local(self) -> None:
        for record in self._records:
            local = resolve_local_filename(self.root, record.filename)
            if local is None:
                record.local_filename = None
                record.local_checksum = None
                record.status = FileStatus.NOT_INSTALLED
                continue

            record.local_filename = local
            record.local_checksum = checksum_file(self.root / local)
            if record.checksum is None or record.checksum == record.local_checksum:
                record.status = FileStatus.INSTALLED
            else:
                record.status = FileStatus.MODIFIED
                logger.debug("Locally modified: %s", local)

        tracked = {record.local_filename for record in self._records if record.local_filename}
        untracked = [
            relative for relative in scan_managed_files(self.root) if relative not in tracked
        ]
        for relative in untracked:
            self._records.append(local_record(self.root, relative, FileStatus.LOCAL_ONLY))
        if untracked:
            logger.debug("Found %d local-only files", len(untracked))

    def sort(self) -> None:
        self._records.sort(key=lambda record: record.path)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._records)


class UpdaterRegistry(RegistryAdapter):
    name = "updater"

    def records(self) -> list[FileRecord]:
        collection = FilesCollection(self.root).read()
        collection.update_from_local()
        collection.sort()
        return [
            record
            for record in collection
            if record.status is not FileStatus.NOT_INSTALLED
        ]


def resolve_local_filename(root: Path, filename: str) -> Optional[str]:
    """Find the installed copy of ``filename``, allowing ``name-<version>.jar``."""
    if (root / filename).is_file():
        return filename

    if not filename.endswith(".jar"):
        return None

    path = PurePosixPath(filename)
    versioned = re.compile(re.escape(path.stem) + r"-\d[^/]*\.jar")
    parent = "" if str(path.parent) == "." else f"{path.parent}/"

    for candidate in list_visible(root / path.parent):
        if candidate.is_file() and versioned.fullmatch(candidate.name):
            return f"{parent}{candidate.name}"

    return None


def _parse_plugin(element: ElementTree.Element) -> FileRecord:
    filename = element.get("filename")
    if not filename:
        raise RegistryError("Update database contains a record without a filename")

    platforms = frozenset(
        platform.text.strip()
        for platform in element.findall("platform")
        if platform.text and platform.text.strip()
    )

    version = element.find("version")

    return FileRecord(
        filename=filename,
        platforms=platforms,
        executable=element.get("executable") == "true",
        checksum=version.get("checksum") if version is not None else None,
    )
