"""Decide when two adjacent pieces of emitted Lua need a space between them."""

from __future__ import annotations


def _is_word_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_word_part(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def needs_separator(before: str, after: str) -> bool:
    """Return True when ``before + after`` would lex differently from the two pieces apart.

    ``before`` is the tail of the text emitted so far (its last one or two
    characters are inspected); ``after`` is the text about to be appended
    (only its first character is inspected).
    """
    if not before or not after:
        return False
    last = before[-1]
    first = after[0]

    if _is_word_start(last):
        return _is_word_part(first)
    if last.isdigit():
        if first == "(":
            return False
        return first == "." or _is_word_start(first)
    if last == "-" and first == "-":
        return True
    if last == ".":
        if first == ".":
            return True
        penultimate = before[-2] if len(before) > 1 else ""
        return penultimate != "." and _is_word_part(first)
    # `<const>=1` would lex as `>=`
    if last == ">" and first == "=":
        return True
    # `[` followed by `[` or `=` would open a long bracket.
    if last == "[" and first in "[=":
        return True
    return False


def separator(before: str, after: str) -> str:
    return " " if needs_separator(before, after) else ""
