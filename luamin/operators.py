from __future__ import annotations

# Higher binds tighter. Bitwise operators sit between comparisons and `..`.
PRECEDENCE: dict[str, float] = {
    "or": 1,
    "and": 2,
    "<": 3, ">": 3, "<=": 3, ">=": 3, "~=": 3, "==": 3,
    "|": 4.2,
    "~": 4.4,
    "&": 4.6,
    "<<": 4.8, ">>": 4.8,
    "..": 5,
    "+": 6, "-": 6,
    "*": 7, "/": 7, "//": 7, "%": 7,
    "unarynot": 8, "unary#": 8, "unary-": 8, "unary~": 8,
    "^": 10,
}

RIGHT_ASSOCIATIVE = frozenset({"^", ".."})


def binary_precedence(operator: str) -> float:
    return PRECEDENCE[operator]


def unary_precedence(operator: str) -> float:
    return PRECEDENCE["unary" + operator]


def associativity(operator: str) -> str:
    return "right" if operator in RIGHT_ASSOCIATIVE else "left"
