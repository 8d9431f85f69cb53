from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PRAGMA_MARKERS = ("--#", "[[#")


@dataclass
class MinifyOptions:
    module_like: bool = False
    extension: str = ".lua"
    pragma_markers: tuple[str, ...] = DEFAULT_PRAGMA_MARKERS
    # extra modules bundled in module-like mode even if no literal require names them
    include: tuple[str, ...] = ()
    source_map_url: str | None = None
    embed_sources: bool = True
