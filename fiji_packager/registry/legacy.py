import logging
from pathlib import Path

from fiji_packager.platforms import (
    KNOWN_PLATFORMS,
    MACOS_LAUNCHER_DIR,
    is_launcher,
    launcher_platform,
)
from fiji_packager.registry.base import (
    FileRecord,
    FileStatus,
    RegistryAdapter,
    checksum_file,
)
from fiji_packager.utils.fs import list_files, list_visible

logger = logging.getLogger(__name__)

MANAGED_DIRECTORIES = (
    "jars",
    "plugins",
    "macros",
    "scripts",
    "luts",
    "retro",
    "misc",
    "images",
    "lib",
)

# native code is kept in per-platform subdirectories of these
PLATFORM_DIRECTORIES = ("jars", "lib")


class LegacyRegistry(RegistryAdapter):
    """Checksums the updater-managed locations of installations without a database."""

    name = "legacy"

    def records(self) -> list[FileRecord]:
        records = [
            local_record(self.root, relative, FileStatus.INSTALLED)
            for relative in scan_managed_files(self.root)
        ]
        records.sort(key=lambda record: record.path)
        logger.debug("Found %d local files in %s", len(records), self.root)
        return records


def scan_managed_files(root: Path) -> list[str]:
    """Launchers plus everything below the updater-managed directories."""
    found: list[str] = []

    for candidate in list_visible(root):
        if candidate.is_file() and is_launcher(candidate.name):
            found.append(candidate.name)

    for candidate in list_visible(root / MACOS_LAUNCHER_DIR):
        if candidate.is_file() and is_launcher(candidate.name):
            found.append(f"{MACOS_LAUNCHER_DIR}/{candidate.name}")

    for directory in MANAGED_DIRECTORIES:
        found.extend(list_files(root, directory))

    return found


def local_record(root: Path, relative: str, status: FileStatus) -> FileRecord:
    return FileRecord(
        filename=relative,
        platforms=infer_platforms(relative),
        executable=is_launcher(relative),
        local_filename=relative,
        local_checksum=checksum_file(root / relative),
        status=status,
    )


def infer_platforms(relative: str) -> frozenset[str]:
    parts = relative.split("/")

    if len(parts) > 2 and parts[0] in PLATFORM_DIRECTORIES and parts[1] in KNOWN_PLATFORMS:
        return frozenset({parts[1]})

    platform = launcher_platform(parts[-1])
    if platform is not None:
        return frozenset({platform})

    return frozenset()
