from pathlib import Path
from dataclasses import dataclass

from fiji_packager.platforms import relocate_launcher
from fiji_packager.registry.database import DATABASE_NAME
from fiji_packager.runtime.discover import RUNTIME_ROOT

DEFAULT_PREFIX = "Fiji.app/"

# attempted first, in this order, whether or not they exist
BOOTSTRAP_FILES = (
    DATABASE_NAME,
    "ImageJ",
    "ImageJ.exe",
    "Contents/Info.plist",
)

@dataclass(frozen=True)
class BundleLayout:
    root: Path
    prefix: str = DEFAULT_PREFIX

    @property
    def runtime_dir(self) -> Path:
        return self.root / RUNTIME_ROOT

    def bootstrap_files(self) -> list[str]:
        return list(BOOTSTRAP_FILES)

    def staged_name(self, relative: str) -> str:
        """Where ``relative`` is staged, after moving macOS launchers into the app bundle."""
        return relocate_launcher(relative)

    def source(self, relative: str) -> Path:
        return self.root / self.staged_name(relative)

    def entry_name(self, relative: str) -> str:
        return f"{self.prefix}{self.staged_name(relative)}"
