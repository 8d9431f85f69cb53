"""Closed set of Lua syntax tree nodes consumed by the printer.

The front-end builds these from parser output; nothing downstream mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True, order=True)
class SourcePosition:
    line: int  # 1-based
    column: int  # 0-based


class LiteralKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NIL = "nil"
    VARARG = "vararg"


# -- expressions ---------------------------------------------------------------


@dataclass
class Identifier:
    name: str
    is_local: bool = False
    loc: SourcePosition | None = None
    attribute: str | None = None  # `const` or `close` on a local declaration


@dataclass
class Literal:
    kind: LiteralKind
    raw: str
    value: object = None
    in_parens: bool = False
    loc: SourcePosition | None = None


@dataclass
class BinaryExpression:
    operator: str
    left: Expression
    right: Expression
    loc: SourcePosition | None = None


@dataclass
class LogicalExpression:
    operator: str
    left: Expression
    right: Expression
    loc: SourcePosition | None = None


@dataclass
class UnaryExpression:
    operator: str
    argument: Expression
    loc: SourcePosition | None = None


@dataclass
class CallExpression:
    base: Expression
    arguments: list[Expression] = field(default_factory=list)
    in_parens: bool = False
    loc: SourcePosition | None = None


@dataclass
class TableCallExpression:
    base: Expression
    argument: TableConstructor
    in_parens: bool = False
    loc: SourcePosition | None = None


@dataclass
class StringCallExpression:
    base: Expression
    argument: Literal
    in_parens: bool = False
    loc: SourcePosition | None = None


@dataclass
class IndexExpression:
    base: Expression
    index: Expression
    loc: SourcePosition | None = None


@dataclass
class MemberExpression:
    base: Expression
    indexer: str  # "." or ":"
    identifier: Identifier
    loc: SourcePosition | None = None


@dataclass
class FunctionExpression:
    parameters: list[Identifier | Literal]
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class TableKey:
    key: Expression
    value: Expression
    loc: SourcePosition | None = None


@dataclass
class TableKeyString:
    key: Identifier
    value: Expression
    loc: SourcePosition | None = None


@dataclass
class TableValue:
    value: Expression
    loc: SourcePosition | None = None


TableField = Union[TableKey, TableKeyString, TableValue]


@dataclass
class TableConstructor:
    fields: list[TableField] = field(default_factory=list)
    loc: SourcePosition | None = None


Expression = Union[
    Identifier,
    Literal,
    BinaryExpression,
    LogicalExpression,
    UnaryExpression,
    CallExpression,
    TableCallExpression,
    StringCallExpression,
    IndexExpression,
    MemberExpression,
    FunctionExpression,
    TableConstructor,
]


# -- statements ----------------------------------------------------------------


@dataclass
class AssignmentStatement:
    variables: list[Expression]
    init: list[Expression]
    loc: SourcePosition | None = None


@dataclass
class LocalStatement:
    variables: list[Identifier]
    init: list[Expression] = field(default_factory=list)
    loc: SourcePosition | None = None


@dataclass
class CallStatement:
    expression: Expression
    loc: SourcePosition | None = None


@dataclass
class IfClause:
    condition: Expression
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class ElseifClause:
    condition: Expression
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class ElseClause:
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class IfStatement:
    clauses: list[IfClause | ElseifClause | ElseClause]
    loc: SourcePosition | None = None


@dataclass
class WhileStatement:
    condition: Expression
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class DoStatement:
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class ReturnStatement:
    arguments: list[Expression] = field(default_factory=list)
    loc: SourcePosition | None = None


@dataclass
class BreakStatement:
    loc: SourcePosition | None = None


@dataclass
class RepeatStatement:
    body: list[Statement]
    condition: Expression
    loc: SourcePosition | None = None


@dataclass
class FunctionDeclaration:
    identifier: Identifier | MemberExpression | None
    is_local: bool
    parameters: list[Identifier | Literal]
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class ForNumericStatement:
    variable: Identifier
    start: Expression
    end: Expression
    step: Expression | None
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class ForGenericStatement:
    variables: list[Identifier]
    iterators: list[Expression]
    body: list[Statement]
    loc: SourcePosition | None = None


@dataclass
class LabelStatement:
    label: Identifier
    loc: SourcePosition | None = None


@dataclass
class GotoStatement:
    label: Identifier
    loc: SourcePosition | None = None


Statement = Union[
    AssignmentStatement,
    LocalStatement,
    CallStatement,
    IfStatement,
    WhileStatement,
    DoStatement,
    ReturnStatement,
    BreakStatement,
    RepeatStatement,
    FunctionDeclaration,
    ForNumericStatement,
    ForGenericStatement,
    LabelStatement,
    GotoStatement,
]


@dataclass
class Comment:
    raw: str
    loc: SourcePosition | None = None


@dataclass
class Chunk:
    """A parsed module: its statements, the free names it references and its comments."""

    body: list[Statement]
    globals: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)


def walk(root: object):
    """Yield every node reachable from ``root`` (a node or a list of nodes) in source order."""
    stack: list[object] = list(reversed(root)) if isinstance(root, list) else [root]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            stack.extend(reversed(node))
            continue
        if not is_dataclass(node) or isinstance(node, SourcePosition):
            continue
        yield node
        stack.extend(reversed([getattr(node, f.name) for f in fields(node)]))
