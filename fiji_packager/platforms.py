import platform
from typing import Optional

KNOWN_PLATFORMS = (
    "linux32",
    "linux64",
    "macosx",
    "tiger",
    "win32",
    "win64",
)

LAUNCHER_NAMES = ("ImageJ", "fiji")

# launchers that must live inside the macOS application bundle
MACOS_LAUNCHERS = ("ImageJ-macosx", "ImageJ-tiger")
MACOS_LAUNCHER_DIR = "Contents/MacOS"


def current_platform() -> str:
    is64bit = "64" in platform.machine()
    system = platform.system()

    if system == "Linux":
        return "linux64" if is64bit else "linux32"
    if system == "Darwin":
        return "macosx"
    if system == "Windows":
        return "win64" if is64bit else "win32"
    return system.lower()


def is_launcher(name: str) -> bool:
    for prefix in ("Fiji.app/", f"{MACOS_LAUNCHER_DIR}/"):
        if name.startswith(prefix):
            name = name[len(prefix):]
    if name.endswith(".exe"):
        name = name[: -len(".exe")]

    if name in LAUNCHER_NAMES:
        return True
    return any(name.startswith(f"{launcher}-") for launcher in LAUNCHER_NAMES)


def launcher_platform(name: str) -> Optional[str]:
    """Platform a launcher such as ``ImageJ-win64.exe`` was built for."""
    if name.endswith(".exe"):
        name = name[: -len(".exe")]
    for launcher in LAUNCHER_NAMES:
        prefix = f"{launcher}-"
        if name.startswith(prefix) and name[len(prefix):] in KNOWN_PLATFORMS:
            return name[len(prefix):]
    return None


def relocate_launcher(name: str) -> str:
    if name in MACOS_LAUNCHERS:
        return f"{MACOS_LAUNCHER_DIR}/{name}"
    return name
