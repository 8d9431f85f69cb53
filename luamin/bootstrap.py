from __future__ import annotations

from string import Template
from typing import Iterable

from .fragment import Fragment
from .frontend import quote_string

LOADER_HEAD = (
    "function require(m,r)package=package or{loaded={}};"
    "if package.loaded[m]then return package.loaded[m]end\n"
)
LOADER_TAIL = "package.loaded[m]=package.loaded[m]or r or true;return package.loaded[m]end\n"

_BRANCH = Template("if m==${name}then r=(function() ")
_BRANCH_END = " end)()end\n"
_MAP_COMMENT = Template("\n--[[\n//# sourceMappingURL=$url\n]]")

# Names the loader itself relies on at runtime.
LOADER_GLOBALS = ("require", "package")


def generate_loader(modules: Iterable[tuple[str, Fragment]]) -> Fragment:
    """Build a ``require`` replacement that runs each bundled body once and caches its result.

    Every body is wrapped in an immediately invoked function so its locals and
    its ``return`` stay private to that module.
    """
    loader = Fragment(LOADER_HEAD)
    for name, body in modules:
        loader.add([_BRANCH.substitute(name=quote_string(name)), body, _BRANCH_END])
    loader.add(LOADER_TAIL)
    return loader


def source_map_comment(url: str) -> str:
    return _MAP_COMMENT.substitute(url=url)
