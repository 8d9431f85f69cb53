from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Union

from .nodes import SourcePosition
from .sourcemap import SourceMapGenerator

Chunk = Union[str, "Fragment"]


class Fragment:
    """Output tree node: ordered text/fragment children plus optional origin metadata.

    A fragment may be attached to at most one parent. Stringifying never
    mutates the tree, so the printer can peek at boundary characters while
    still composing; ``finalize`` is the one pass that produces the source map.
    """

    __slots__ = ("children", "origin", "source", "name", "_attached")

    def __init__(
        self,
        children: Chunk | Iterable[Chunk] | None = None,
        origin: SourcePosition | None = None,
        source: str | None = None,
        name: str | None = None,
    ) -> None:
        self.children: list[Chunk] = []
        self.origin = origin
        self.source = source
        self.name = name
        self._attached = False
        if children is not None:
            self.add(children)

    def __repr__(self) -> str:
        return f"Fragment({self.to_string()!r}, origin={self.origin!r})"

    def _adopt(self, chunk: Chunk | Iterable[Chunk]) -> list[Chunk]:
        if isinstance(chunk, (str, Fragment)):
            chunks: list[Chunk] = [chunk]
        else:
            chunks = list(chunk)
        for child in chunks:
            if isinstance(child, Fragment):
                if child is self or child._attached:
                    raise ValueError("fragment already has a parent")
                child._attached = True
            elif not isinstance(child, str):
                raise TypeError(f"expected str or Fragment, got {type(child).__name__}")
        return chunks

    def add(self, chunk: Chunk | Iterable[Chunk]) -> Fragment:
        self.children.extend(self._adopt(chunk))
        return self

    def prepend(self, chunk: Chunk | Iterable[Chunk]) -> Fragment:
        self.children[:0] = self._adopt(chunk)
        return self

    def walk(self) -> Iterator[tuple[str, Fragment | None]]:
        """Yield text leaves in output order with their nearest origin-bearing ancestor."""
        stack: list[tuple[Chunk, Fragment | None]] = [(self, None)]
        while stack:
            node, owner = stack.pop()
            if isinstance(node, str):
                yield node, owner
                continue
            if node.origin is not None:
                owner = node
            stack.extend((child, owner) for child in reversed(node.children))

    def to_string(self) -> str:
        return "".join(text for text, _ in self.walk())

    __str__ = to_string

    def is_empty(self) -> bool:
        return not self.head(1)

    def head(self, n: int = 1) -> str:
        collected = ""
        stack: list[Chunk] = [self]
        while stack and len(collected) < n:
            node = stack.pop()
            if isinstance(node, str):
                collected += node
            else:
                stack.extend(reversed(node.children))
        return collected[:n]

    def tail(self, n: int = 2) -> str:
        collected = ""
        stack: list[Chunk] = [self]
        while stack and len(collected) < n:
            node = stack.pop()
            if isinstance(node, str):
                collected = node + collected
            else:
                stack.extend(node.children)
        return collected[-n:] if n else ""

    def finalize(
        self,
        file: str | None = None,
        sources_content: Mapping[str, str] | None = None,
    ) -> tuple[str, SourceMapGenerator]:
        generator = SourceMapGenerator(file)
        parts: list[str] = []
        line, column = 1, 0
        last_owner: Fragment | None = None

        def emit(owner: Fragment | None) -> None:
            if owner is None:
                generator.add_mapping(line, column)
            else:
                generator.add_mapping(
                    line,
                    column,
                    owner.source,
                    owner.origin.line,
                    owner.origin.column,
                    owner.name,
                )

        for text, owner in self.walk():
            if not text:
                continue
            parts.append(text)
            if owner is not last_owner and (owner is not None or last_owner is not None):
                emit(owner)
            last_owner = owner
            pieces = text.split("\n")
            column += len(pieces[0])
            for piece in pieces[1:]:
                line += 1
                column = 0
                if piece and owner is not None:
                    emit(owner)
                    last_owner = owner
                else:
                    last_owner = None
                column += len(piece)

        for source, content in (sources_content or {}).items():
            generator.set_source_content(source, content)
        return "".join(parts), generator
