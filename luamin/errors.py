from __future__ import annotations


class LuaminError(Exception):
    """Base error for all minification and bundling failures."""


class LuaSyntaxError(LuaminError):
    """The parsing front-end rejected a module's source text."""

    def __init__(self, module: str, message: str) -> None:
        super().__init__(f"{module}: {message}")
        self.module = module


class UnsupportedNodeError(LuaminError):
    """A syntax node outside the known statement/expression set reached the printer."""

    def __init__(self, node: object) -> None:
        super().__init__(f"Unknown node type: `{type(node).__name__}`")
        self.node = node


class ModuleResolutionError(LuaminError):
    """A required module could not be located."""

    def __init__(self, module: str, message: str | None = None) -> None:
        super().__init__(message or f"{module} is not found")
        self.module = module


class CyclicDependencyError(ModuleResolutionError):
    """A module was required again while its own dependencies were still being resolved."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__(chain[-1], "cyclic require: " + " -> ".join(chain))
        self.chain = chain
