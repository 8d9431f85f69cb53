from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger(__name__)

IDENTIFIER_PARTS = (
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "_"
)

LUA_KEYWORDS = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for",
        "function", "goto", "if", "in", "local", "nil", "not", "or",
        "repeat", "return", "then", "true", "until", "while",
    }
)

# Names whose meaning depends on the name itself.
PRESERVED_NAMES = frozenset({"self", "_ENV"})

_FIRST = IDENTIFIER_PARTS[0]
_LAST = IDENTIFIER_PARTS[-1]
_LEADING = "a"


class MinifySession:
    """Short-name allocator shared by every module printed in one run.

    Names are handed out like an odometer over ``IDENTIFIER_PARTS``: the
    rightmost position that can still advance moves by one and everything to
    its right resets to ``"0"``. When every position is exhausted the name
    grows by one character and restarts from ``"a"``, so the leading character
    is never a digit. Candidates that are keywords or reserved are skipped.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self.identifier_map: dict[str, str] = {}
        self.reserved: set[str] = set(reserved) | PRESERVED_NAMES
        self._current = ""

    def reserve(self, names: Iterable[str]) -> None:
        self.reserved.update(names)

    def is_available(self, candidate: str) -> bool:
        return candidate not in LUA_KEYWORDS and candidate not in self.reserved

    def rename(self, original: str) -> str:
        if original in PRESERVED_NAMES:
            return original
        assigned = self.identifier_map.get(original)
        if assigned is not None:
            return assigned

        candidate = self._advance(self._current)
        while not self.is_available(candidate):
            candidate = self._advance(candidate)
        self._current = candidate
        self.identifier_map[original] = candidate
        self.reserved.add(candidate)
        logger.debug("renamed %s -> %s", original, candidate)
        return candidate

    @staticmethod
    def _advance(current: str) -> str:
        length = len(current)
        for position in range(length - 1, -1, -1):
            ch = current[position]
            if ch != _LAST:
                bumped = IDENTIFIER_PARTS[IDENTIFIER_PARTS.index(ch) + 1]
                return current[:position] + bumped + _FIRST * (length - position - 1)
        return _LEADING + _FIRST * length
