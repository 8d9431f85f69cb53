"""Lua minifier with source maps and require() bundling."""

from __future__ import annotations

__version__ = "0.1.0"

from .bundler import BundleResult, Bundler, Module, ModuleGraph, ModuleStatus, minify  # noqa: E402
from .config import MinifyOptions  # noqa: E402
from .errors import (  # noqa: E402
    CyclicDependencyError,
    LuaminError,
    LuaSyntaxError,
    ModuleResolutionError,
    UnsupportedNodeError,
)
from .fragment import Fragment  # noqa: E402
from .naming import MinifySession  # noqa: E402
from .printer import Printer  # noqa: E402
from .sources import FileSystemSource, MappingSource  # noqa: E402

__all__ = [
    "BundleResult",
    "Bundler",
    "CyclicDependencyError",
    "FileSystemSource",
    "Fragment",
    "LuaSyntaxError",
    "LuaminError",
    "MappingSource",
    "MinifyOptions",
    "MinifySession",
    "Module",
    "ModuleGraph",
    "ModuleResolutionError",
    "ModuleStatus",
    "Printer",
    "UnsupportedNodeError",
    "minify",
    "__version__",
]
