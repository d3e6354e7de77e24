"""
Options for opening a store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

ENV_DIRNAME = "MONGOLET_DIR"
FILE_SUFFIX = ".json"


def _default_dirname() -> Path:
    return Path(os.environ.get(ENV_DIRNAME) or ".")


@dataclass(frozen=True, slots=True)
class StoreOptions:
    """
    How a named store is located and persisted.

    In-memory stores never touch the filesystem; persisted stores live in
    ``dirname / "<name>.json"``.
    """

    name: str
    dirname: Path = field(default_factory=_default_dirname)
    in_memory: bool = False
    create_if_not_exists: bool = False
    sync_every_write: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ConfigError("store name is required")

        name = self.name
        if name.endswith(FILE_SUFFIX):
            name = name[: -len(FILE_SUFFIX)]
        if not name:
            raise ConfigError(f"invalid store name: {self.name!r}")
        if "/" in name or "\\" in name:
            raise ConfigError(f"store name must not contain a path separator: {self.name!r}")

        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "dirname", Path(self.dirname))

    @property
    def path(self) -> Path:
        return self.dirname / f"{self.name}{FILE_SUFFIX}"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "dirname": str(self.dirname),
            "in_memory": self.in_memory,
        }
