import errno
import os
from pathlib import Path

from fiji_packager.errors import PackagerError


class FilesystemError(PackagerError):
    exit_code = 12

def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create directory: {path}"
        ) from exc


def remove_file(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
    except OSError as exc:
        raise FilesystemError(
            f"Failed to remove file: {path}"
        ) from exc


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def is_name_too_long(exc: OSError) -> bool:
    if exc.errno == errno.ENAMETOOLONG:
        return True
    return str(exc).startswith("File name too long")


def list_visible(directory: Path) -> list[Path]:
    """Sorted children of ``directory`` without dot-files; empty if unreadable."""
    try:
        children = sorted(directory.iterdir(), key=lambda child: child.name)
    except OSError:
        return []
    return [child for child in children if not is_hidden(child.name)]


def list_files(root: Path, directory: str) -> list[str]:
    """Regular files below ``root/directory`` as root-relative posix paths."""
    files: list[str] = []

    for child in list_visible(root / directory):
        relative = f"{directory}/{child.name}"
        if child.is_dir():
            files.extend(list_files(root, relative))
        elif child.is_file():
            files.append(relative)

    return files
