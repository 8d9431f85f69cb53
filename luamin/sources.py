"""Where module text comes from: dotted module names mapped onto files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Mapping, Protocol


class ModuleSource(Protocol):
    def path_for(self, name: str) -> str: ...

    def read(self, name: str) -> str | None: ...


def module_path(name: str, extension: str = ".lua") -> str:
    return PurePosixPath(*name.split(".")).as_posix() + extension


@dataclass
class FileSystemSource:
    root: Path
    extension: str = ".lua"
    # names whose file does not follow the dotted layout, e.g. the entry script
    files: dict[str, Path] = field(default_factory=dict)

    def path_for(self, name: str) -> str:
        override = self.files.get(name)
        if override is not None:
            return override.name
        return module_path(name, self.extension)

    def read(self, name: str) -> str | None:
        path = self.files.get(name) or self.root / self.path_for(name)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8", errors="ignore")


@dataclass
class MappingSource:
    modules: Mapping[str, str]
    extension: str = ".lua"

    def path_for(self, name: str) -> str:
        return module_path(name, self.extension)

    def read(self, name: str) -> str | None:
        return self.modules.get(name)
