from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from fiji_packager.archive.backend import ArchiveBackend
from fiji_packager.archive.formats import backend_for_path
from fiji_packager.bundle.fileset import FileSet
from fiji_packager.bundle.layout import DEFAULT_PREFIX, BundleLayout
from fiji_packager.config import PackageConfig
from fiji_packager.errors import (
    ArchiveStateError,
    ArchiveWriteError,
    ConfigError,
    EntryNameTooLongError,
)
from fiji_packager.platforms import is_launcher
from fiji_packager.progress import Progress
from fiji_packager.registry.base import RegistryAdapter
from fiji_packager.registry.select import registry_for
from fiji_packager.runtime.discover import discover_runtime_files
from fiji_packager.utils.fs import (
    ensure_dir,
    is_executable,
    is_name_too_long,
    remove_file,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageResult:
    output: Path
    written: int = 0
    missing: int = 0
    dropped: list[str] = field(default_factory=list)


class Packager:
    """Streams a staged installation into one archive.

    ``initialize`` decides which files belong in the archive, ``open``
    creates the output, ``add_default_files`` writes them in order and
    ``close`` finalizes the container.
    """

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_PREFIX,
        backend: Optional[ArchiveBackend] = None,
        registry: Optional[RegistryAdapter] = None,
        registry_kind: str = "updater",
        progress: Optional[Progress] = None,
    ) -> None:
        self.prefix = prefix
        self.backend = backend
        self.registry = registry
        self.registry_kind = registry_kind
        self.progress = progress

        self.layout: Optional[BundleLayout] = None
        self.output: Optional[Path] = None
        self.files: Optional[FileSet] = None

        self.written = 0
        self.missing = 0
        self.dropped: list[str] = []
        self._entries: set[str] = set()

    def initialize(
        self,
        root: Optional[Path],
        *,
        include_runtime: bool = False,
        platforms: Iterable[str] = (),
    ) -> FileSet:
        if root is None:
            raise ConfigError(
                "Need the installation root (pass --root or set IJ_DIR)"
            )
        root = Path(root)
        if not root.is_dir():
            raise ConfigError(f"Installation root does not exist: {root}")

        requested = list(platforms)
        layout = BundleLayout(root.resolve(), prefix=self.prefix)
        files = FileSet(layout.bootstrap_files())

        registry = self.registry or registry_for(self.registry_kind, layout.root)
        added = files.update(registry.get_file_list(requested))
        logger.info("Registry contributed %d files", added)

        if include_runtime:
            added = files.update(discover_runtime_files(layout.root, requested))
            logger.info("Runtime contributed %d files from %s", added, layout.runtime_dir)

        self.layout = layout
        self.files = files
        return files

    def open(self, output: Path | str) -> None:
        output = Path(output)
        if self.backend is None:
            self.backend = backend_for_path(output)

        ensure_dir(output.parent)
        try:
            sink = output.open("wb")
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to create {output}: {exc}") from exc
        self.output = output

        self.backend.open(sink)
        logger.debug("Writing %s archive to %s", self.backend.extension, output)

    def add_default_files(self) -> None:
        files = self._require_files()
        files.freeze()
        total = len(files)

        if self.progress:
            self.progress.set_title("Writing files")

        for count, name in enumerate(files, start=1):
            if self.progress:
                self.progress.add_item(name)

            self.add_file(name, is_launcher(name))

            if self.progress:
                self.progress.set_count(count, total)
                self.progress.item_done(name)

        if self.progress:
            self.progress.done()

    def add_file(self, name: str, executable: bool = False) -> bool:
        layout = self._require_layout()
        backend = self._require_backend()

        source = layout.source(name)
        entry = layout.entry_name(name)

        if entry in self._entries:
            logger.debug("Already written: %s", entry)
            return False

        try:
            if not source.is_file():
                logger.debug("Skipping missing file: %s", name)
                self.missing += 1
                return False

            executable = executable or is_executable(source)

            with source.open("rb") as stream:
                info = os.fstat(stream.fileno())
                backend.put_entry(entry, executable, info.st_size, info.st_mtime)
                backend.write_stream(stream)
                backend.close_entry()

        except EntryNameTooLongError as exc:
            self._drop(name, exc)
            return False

        except OSError as exc:
            if is_name_too_long(exc) and backend.current_entry is None:
                self._drop(name, exc)
                return False
            raise ArchiveWriteError(f"Failed to read {source}: {exc}") from exc

        self._entries.add(entry)
        self.written += 1
        return True

    def close(self) -> None:
        self._require_backend().close()
        logger.info(
            "Wrote %d entries (%d missing, %d skipped)",
            self.written,
            self.missing,
            len(self.dropped),
        )

    def abort(self) -> None:
        if self.backend is not None:
            self.backend.abort()

    def _drop(self, name: str, exc: Exception) -> None:
        logger.warning("Skipping %s: %s", name, exc)
        self.dropped.append(name)

    def _require_layout(self) -> BundleLayout:
        if self.layout is None:
            raise ArchiveStateError("Packager has not been initialized")
        return self.layout

    def _require_files(self) -> FileSet:
        if self.files is None:
            raise ArchiveStateError("Packager has not been initialized")
        return self.files

    def _require_backend(self) -> ArchiveBackend:
        if self.backend is None or not self.backend.is_open:
            raise ArchiveStateError("Archive has not been opened")
        return self.backend


def package(
    config: PackageConfig,
    *,
    registry: Optional[RegistryAdapter] = None,
    progress: Optional[Progress] = None,
) -> PackageResult:
    # format and codec problems surface before any file is touched
    backend = backend_for_path(config.output)

    packager = Packager(
        prefix=config.prefix,
        backend=backend,
        registry=registry,
        registry_kind=config.registry,
        progress=progress,
    )
    packager.initialize(
        config.root,
        include_runtime=config.include_runtime,
        platforms=config.platforms,
    )

    try:
        packager.open(config.output)
        packager.add_default_files()
        packager.close()
    except Exception:
        packager.abort()
        if packager.output is not None:
            remove_file(packager.output)
        raise

    return PackageResult(
        output=config.output,
        written=packager.written,
        missing=packager.missing,
        dropped=list(packager.dropped),
    )
