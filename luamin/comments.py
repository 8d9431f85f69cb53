from __future__ import annotations

import re
from bisect import bisect_left, bisect_right

from .nodes import Comment, SourcePosition

# Strings are matched alongside comments so a `--` inside a literal is never taken for one.
_TOKEN = re.compile(
    r"(?P<comment>--\[(?P<ceq>=*)\[[\s\S]*?\](?P=ceq)\]|--[^\r\n]*)"
    r"|\[(?P<seq>=*)\[[\s\S]*?\](?P=seq)\]"
    r"|\"(?:\\[\s\S]|[^\\\n\"])*\"|'(?:\\[\s\S]|[^\\\n'])*'"
    r"|(?P<number>0[xX][0-9a-fA-F.]*(?:[pP][+-]?\d+)?|\d[\d.]*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
)


class LineIndex:
    """Maps character offsets to (line, column) positions."""

    def __init__(self, text: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def position(self, offset: int) -> SourcePosition:
        line = bisect_right(self._starts, offset)
        return SourcePosition(line, offset - self._starts[line - 1])


class NameIndex:
    """Offsets of every name token in a source text, outside comments and strings."""

    def __init__(self, source: str) -> None:
        self._offsets: dict[str, list[int]] = {}
        for match in _TOKEN.finditer(source):
            name = match.group("name")
            if name is not None:
                self._offsets.setdefault(name, []).append(match.start())

    def find(self, name: str, start: int = 0) -> int | None:
        """First offset of ``name`` at or after ``start``."""
        offsets = self._offsets.get(name, [])
        i = bisect_left(offsets, start)
        return offsets[i] if i < len(offsets) else None


def scan_comments(source: str, index: LineIndex | None = None) -> list[Comment]:
    index = index or LineIndex(source)
    comments: list[Comment] = []
    for match in _TOKEN.finditer(source):
        if match.group("comment") is None:
            continue
        comments.append(Comment(raw=match.group("comment"), loc=index.position(match.start())))
    return comments


def is_pragma(comment: Comment, markers: tuple[str, ...]) -> bool:
    return any(marker in comment.raw for marker in markers)
