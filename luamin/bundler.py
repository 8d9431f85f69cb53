from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from . import frontend
from .bootstrap import LOADER_GLOBALS, generate_loader, source_map_comment
from .comments import is_pragma
from .config import MinifyOptions
from .errors import CyclicDependencyError, LuaminError, ModuleResolutionError
from .fragment import Fragment
from .naming import MinifySession
from .nodes import CallExpression, Chunk, Identifier, Literal, LiteralKind, StringCallExpression, walk
from .printer import Printer
from .sourcemap import SourceMapGenerator
from .sources import MappingSource, ModuleSource

logger = logging.getLogger(__name__)

ParseFn = Callable[[str, str], Chunk]


class ModuleStatus(Enum):
    PENDING = "pending"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Module:
    name: str
    path: str
    source: str | None = None
    chunk: Chunk | None = None
    fragment: Fragment | None = None
    status: ModuleStatus = ModuleStatus.PENDING
    requires: list[str] = field(default_factory=list)


@dataclass
class ModuleGraph:
    entry: str
    modules: dict[str, Module] = field(default_factory=dict)
    # completion order of resolution: every module after the modules it requires
    order: list[str] = field(default_factory=list)
    resolving: set[str] = field(default_factory=set)

    def __contains__(self, name: str) -> bool:
        return name in self.modules

    def __getitem__(self, name: str) -> Module:
        return self.modules[name]

    def dependencies_first(self) -> list[Module]:
        return [self.modules[name] for name in self.order]


@dataclass
class BundleResult:
    code: str
    source_map: SourceMapGenerator
    graph: ModuleGraph
    session: MinifySession


def find_requires(chunk: Chunk) -> list[str]:
    """Module names passed as a literal string to the free ``require`` function."""
    names: list[str] = []
    for node in walk(chunk.body):
        argument = None
        if isinstance(node, CallExpression) and _is_require(node.base) and len(node.arguments) == 1:
            argument = node.arguments[0]
        elif isinstance(node, StringCallExpression) and _is_require(node.base):
            argument = node.argument
        if isinstance(argument, Literal) and argument.kind is LiteralKind.STRING:
            name = str(argument.value)
            if name not in names:
                names.append(name)
    return names


def _is_require(base) -> bool:
    return isinstance(base, Identifier) and base.name == "require" and not base.is_local


class Bundler:
    """Resolve an entry module's requires, print every module once and stitch the output.

    Every module is parsed before any is printed, so the free names of all
    modules are reserved before the first short name is handed out.
    """

    def __init__(
        self,
        provider: ModuleSource,
        options: MinifyOptions | None = None,
        parse: ParseFn = frontend.parse,
    ) -> None:
        self.provider = provider
        self.options = options or MinifyOptions()
        self.parse = parse

    def bundle(self, entry: str, output_file: str | None = None) -> BundleResult:
        session = MinifySession()
        if self.options.module_like:
            session.reserve(LOADER_GLOBALS)
        graph = ModuleGraph(entry)

        self.resolve(entry, graph, session)
        if self.options.module_like:
            for name in self.options.include:
                self.resolve(name, graph, session)

        for module in graph.dependencies_first():
            self.generate(module, session)

        root = self.assemble(graph)
        sources = {}
        if self.options.embed_sources:
            sources = {m.path: m.source for m in graph.dependencies_first() if m.source is not None}
        code, source_map = root.finalize(file=output_file, sources_content=sources)
        logger.info("bundled %s: %d module(s), %d characters", entry, len(graph.order), len(code))
        return BundleResult(code, source_map, graph, session)

    def resolve(self, name: str, graph: ModuleGraph, session: MinifySession, chain: tuple[str, ...] = ()) -> Module:
        cached = graph.modules.get(name)
        if cached is not None:
            if name in graph.resolving:
                raise CyclicDependencyError([*chain, name])
            return cached

        module = Module(name, self.provider.path_for(name))
        graph.modules[name] = module
        logger.debug("resolving %s -> %s", name, module.path)
        source = self.provider.read(name)
        if source is None:
            module.status = ModuleStatus.FAILED
            raise ModuleResolutionError(name)
        try:
            module.chunk = self.parse(source, module.path)
        except LuaminError:
            module.status = ModuleStatus.FAILED
            raise
        module.source = source
        module.status = ModuleStatus.GENERATING
        session.reserve(module.chunk.globals)

        if self.options.module_like:
            module.requires = find_requires(module.chunk)
            graph.resolving.add(name)
            try:
                for dependency in module.requires:
                    self.resolve(dependency, graph, session, (*chain, name))
            except LuaminError:
                module.status = ModuleStatus.FAILED
                raise
            finally:
                graph.resolving.discard(name)

        graph.order.append(name)
        return module

    def generate(self, module: Module, session: MinifySession) -> Fragment:
        if module.status is ModuleStatus.DONE and module.fragment is not None:
            return module.fragment
        printer = Printer(session, source=module.path)
        try:
            module.fragment = printer.print_chunk(module.chunk.body)
        except LuaminError:
            module.status = ModuleStatus.FAILED
            raise
        module.status = ModuleStatus.DONE
        logger.debug("printed %s", module.name)
        return module.fragment

    def assemble(self, graph: ModuleGraph) -> Fragment:
        entry = graph[graph.entry]
        root = Fragment()
        if self.options.module_like:
            bundled = [(m.name, m.fragment) for m in graph.dependencies_first() if m.name != graph.entry]
            root.add(generate_loader(bundled))
        root.add(entry.fragment)

        pragmas = [c for c in entry.chunk.comments if is_pragma(c, self.options.pragma_markers)]
        for comment in reversed(pragmas):
            root.prepend([Fragment(comment.raw, origin=comment.loc, source=entry.path), "\n"])

        if self.options.source_map_url:
            root.add(source_map_comment(self.options.source_map_url))
        return root


def minify(source: str, name: str = "main", options: MinifyOptions | None = None) -> BundleResult:
    """Minify a single in-memory module."""
    return Bundler(MappingSource({name: source}), options).bundle(name)
