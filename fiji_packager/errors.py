class PackagerError(Exception):
    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)

class ConfigError(PackagerError):
    exit_code = 2


class UnsupportedFormatError(PackagerError):
    exit_code = 3


class CodecUnavailableError(PackagerError):
    exit_code = 4

class RegistryError(PackagerError):
    exit_code = 5


class RuntimeNotFoundError(PackagerError):
    exit_code = 6


class BundlePathError(PackagerError):
    exit_code = 7

class ArchiveError(PackagerError):
    exit_code = 20


class ArchiveWriteError(ArchiveError):
    exit_code = 21


class ArchiveStateError(ArchiveError):
    exit_code = 22


class EntryNameTooLongError(ArchiveWriteError):
    exit_code = 23
