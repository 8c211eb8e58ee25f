from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fiji_packager.archive.formats import format_for_path
from fiji_packager.bundle.layout import DEFAULT_PREFIX
from fiji_packager.errors import ConfigError
from fiji_packager.registry.select import RegistryKind


class PackageConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    output: Path = Field(
        ...,
        description="Archive to write; its extension selects the format",
        examples=["fiji-linux64.zip", "fiji-nojre.tar.gz"],
    )

    root: Optional[Path] = Field(
        default=None,
        description="Root directory of the staged installation",
    )

    include_runtime: bool = Field(
        default=False,
        description="Bundle the newest JRE for every requested platform",
    )

    platforms: list[str] = Field(
        default_factory=list,
        description="Platforms to package for; empty packages all of them",
        examples=[["linux64", "win64"]],
    )

    prefix: str = Field(
        default=DEFAULT_PREFIX,
        description="Directory inside the archive that holds the installation",
    )

    registry: RegistryKind = Field(
        default="updater",
        description="How to enumerate the installed files",
    )

    @field_validator("output")
    @classmethod
    def validate_output(cls, value: Path) -> Path:
        format_for_path(value)
        if value.is_dir():
            raise ConfigError(f"Output path is a directory: {value}")
        return value

    @field_validator("root")
    @classmethod
    def validate_root(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        if not value.exists():
            raise ConfigError(f"Installation root does not exist: {value}")
        if not value.is_dir():
            raise ConfigError(f"Installation root is not a directory: {value}")
        return value.resolve()

    @field_validator("platforms", mode="before")
    @classmethod
    def split_platforms(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [platform.strip() for platform in value if platform.strip()]

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        value = value.replace("\\", "/")
        if not value:
            return value
        if value.startswith("/"):
            raise ConfigError(f"Archive prefix must be relative: {value}")
        if ".." in value.split("/"):
            raise ConfigError(f"Archive prefix must not contain '..': {value}")
        if not value.endswith("/"):
            value += "/"
        return value
