import logging
from pathlib import Path
from typing import Iterable, Optional

from fiji_packager.errors import RuntimeNotFoundError
from fiji_packager.utils.fs import list_files, list_visible

logger = logging.getLogger(__name__)

RUNTIME_ROOT = "java"

# requested platform -> runtime directory name used by older installations
PLATFORM_ALIASES = {
    "linux32": "linux",
    "linux64": "linux-amd64",
    "macosx": "macosx-java3d",
    "tiger": "macosx-java3d",
}

# aliases that ship one embedded runtime instead of dated candidates
EMBEDDED_RUNTIMES = {
    "macosx-java3d": "Home",
}

def discover_runtime_files(
    root: Path,
    platforms: Iterable[str] = (),
) -> list[str]:
    files: list[str] = []
    for directory in find_runtime_directories(root, platforms):
        found = list_runtime_files(root, directory)
        logger.debug("Runtime %s contributes %d files", directory, len(found))
        files.extend(found)
    return files

def find_runtime_directories(
    root: Path,
    platforms: Iterable[str] = (),
) -> list[str]:
    requested = list(platforms)

    if not requested:
        return _find_all_runtimes(root)

    return [_resolve_platform(root, platform) for platform in requested]


def newest_runtime(root: Path, directory: str) -> Optional[str]:
    """Return ``<directory>/<version>/jre`` for the most recently modified version.

    Candidates without a ``jre`` subdirectory are ignored; on equal
    timestamps the first candidate in name order wins.
    """
    base = root / directory
    if not base.is_dir():
        return None

    newest: Optional[Path] = None
    newest_mtime = 0.0

    for candidate in list_visible(base):
        jre = candidate / "jre"
        if not jre.is_dir():
            continue
        mtime = candidate.stat().st_mtime
        if newest is None or mtime > newest_mtime:
            newest = candidate
            newest_mtime = mtime

    if newest is None:
        return None

    return f"{directory}/{newest.name}/jre"


def list_runtime_files(root: Path, directory: str) -> list[str]:
    if not (root / directory).is_dir():
        raise RuntimeNotFoundError(f"Runtime directory does not exist: {root / directory}")
    return list_files(root, directory)

def _find_all_runtimes(root: Path) -> list[str]:
    java_dir = root / RUNTIME_ROOT
    if not java_dir.is_dir():
        raise RuntimeNotFoundError(f"No JREs found in {java_dir}")

    directories: list[str] = []
    for candidate in list_visible(java_dir):
        if not candidate.is_dir():
            continue
        directory = newest_runtime(root, f"{RUNTIME_ROOT}/{candidate.name}")
        if directory is None:
            logger.debug("No JRE candidate in %s", candidate)
            continue
        directories.append(directory)

    return directories


def _resolve_platform(root: Path, platform: str) -> str:
    directory = newest_runtime(root, f"{RUNTIME_ROOT}/{platform}")
    if directory is not None:
        return directory

    alias = PLATFORM_ALIASES.get(platform)

    if alias in EMBEDDED_RUNTIMES:
        embedded = f"{RUNTIME_ROOT}/{alias}/{EMBEDDED_RUNTIMES[alias]}"
        if (root / embedded).is_dir():
            return embedded

    elif alias is not None:
        directory = newest_runtime(root, f"{RUNTIME_ROOT}/{alias}")
        if directory is not None:
            logger.debug("Using %s for platform %s", directory, platform)
            return directory

    raise RuntimeNotFoundError(f"No JRE found for platform '{platform}'")
