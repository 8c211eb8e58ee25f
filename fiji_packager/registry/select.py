from pathlib import Path
from typing import Literal

from fiji_packager.errors import ConfigError
from fiji_packager.registry.base import RegistryAdapter
from fiji_packager.registry.database import UpdaterRegistry
from fiji_packager.registry.legacy import LegacyRegistry

RegistryKind = Literal["updater", "legacy"]

REGISTRIES: dict[str, type[RegistryAdapter]] = {
    UpdaterRegistry.name: UpdaterRegistry,
    LegacyRegistry.name: LegacyRegistry,
}


def registry_for(kind: str, root: Path) -> RegistryAdapter:
    try:
        registry_class = REGISTRIES[kind]
    except KeyError as exc:
        raise ConfigError(
            f"Unknown registry '{kind}' (expected one of: {', '.join(REGISTRIES)})"
        ) from exc
    return registry_class(root)
