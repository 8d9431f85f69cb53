"""Turn a ``luamin.nodes`` tree back into compact Lua text, one fragment per node."""

from __future__ import annotations

from typing import Iterable, Sequence

from .errors import UnsupportedNodeError
from .fragment import Chunk, Fragment
from .naming import MinifySession
from .nodes import (
    AssignmentStatement,
    BinaryExpression,
    BreakStatement,
    CallExpression,
    CallStatement,
    DoStatement,
    ElseClause,
    ElseifClause,
    Expression,
    ForGenericStatement,
    ForNumericStatement,
    FunctionDeclaration,
    FunctionExpression,
    GotoStatement,
    Identifier,
    IfClause,
    IfStatement,
    IndexExpression,
    LabelStatement,
    Literal,
    LiteralKind,
    LocalStatement,
    LogicalExpression,
    MemberExpression,
    RepeatStatement,
    ReturnStatement,
    SourcePosition,
    Statement,
    StringCallExpression,
    TableCallExpression,
    TableConstructor,
    TableKey,
    TableKeyString,
    TableValue,
    UnaryExpression,
    WhileStatement,
)
from .operators import associativity, binary_precedence, unary_precedence
from .separator import separator

# Some embedded Lua runtimes misread a table whose last value contains a
# closing long bracket unless a trailing field separator follows it.
TRAILING_COMMA_MARKER = "]]"

# Expressions that can only be the prefix of a call, index or member access when parenthesized.
# Calls are prefixes as they stand and keep parens only when the source had them.
PARENTHESIZED_BASES = (
    BinaryExpression,
    LogicalExpression,
    UnaryExpression,
    FunctionExpression,
    TableConstructor,
    Literal,
)


def append(fragment: Fragment, part: Chunk) -> Fragment:
    """Append ``part`` to ``fragment``, inserting a space if the two would merge into one token."""
    head = part[:1] if isinstance(part, str) else part.head(1)
    if not head:
        return fragment
    gap = separator(fragment.tail(2), head)
    if gap:
        fragment.add(gap)
    return fragment.add(part)


def commas(parts: Iterable[Chunk]) -> list[Chunk]:
    out: list[Chunk] = []
    for part in parts:
        if out:
            out.append(",")
        out.append(part)
    return out


class Printer:
    def __init__(self, session: MinifySession, source: str | None = None) -> None:
        self.session = session
        self.source = source

    def fragment(
        self,
        loc: SourcePosition | None,
        parts: Sequence[Chunk] = (),
        name: str | None = None,
    ) -> Fragment:
        fragment = Fragment(origin=loc, source=self.source if loc else None, name=name)
        for part in parts:
            append(fragment, part)
        return fragment

    # -- statements ------------------------------------------------------------

    def print_chunk(self, body: list[Statement]) -> Fragment:
        return self.statements(body)

    def statements(self, body: list[Statement]) -> Fragment:
        out = Fragment()
        for stmt in body:
            printed = self.statement(stmt)
            if printed.head(1) == "(" and not out.is_empty():
                # otherwise `a=b (f)()` reads as the call `b(f)()`
                out.add(";")
            append(out, printed)
        return out

    def statement(self, stmt: Statement) -> Fragment:
        match stmt:
            case LocalStatement() | AssignmentStatement():
                parts: list[Chunk] = ["local"] if isinstance(stmt, LocalStatement) else []
                parts += commas(self.declared(v) for v in stmt.variables)
                if stmt.init:
                    parts.append("=")
                    parts += commas(self.expression(e) for e in stmt.init)
                return self.fragment(stmt.loc, parts)
            case CallStatement():
                return self.fragment(stmt.loc, [self.expression(stmt.expression)])
            case IfStatement():
                clauses = [self.clause(c) for c in stmt.clauses]
                return self.fragment(stmt.loc, [*clauses, "end"])
            case WhileStatement():
                return self.fragment(
                    stmt.loc,
                    ["while", self.expression(stmt.condition), "do", self.statements(stmt.body), "end"],
                )
            case DoStatement():
                return self.fragment(stmt.loc, ["do", self.statements(stmt.body), "end"])
            case ReturnStatement():
                return self.fragment(
                    stmt.loc, ["return", *commas(self.expression(e) for e in stmt.arguments)]
                )
            case BreakStatement():
                return self.fragment(stmt.loc, ["break"])
            case RepeatStatement():
                return self.fragment(
                    stmt.loc,
                    ["repeat", self.statements(stmt.body), "until", self.expression(stmt.condition)],
                )
            case FunctionDeclaration():
                parts = ["local", "function"] if stmt.is_local else ["function"]
                if stmt.identifier is not None:
                    parts.append(self.expression(stmt.identifier))
                parts += self.function_tail(stmt.parameters, stmt.body)
                return self.fragment(stmt.loc, parts)
            case ForNumericStatement():
                parts = [
                    "for",
                    self.expression(stmt.variable),
                    "=",
                    self.expression(stmt.start),
                    ",",
                    self.expression(stmt.end),
                ]
                if stmt.step is not None:
                    parts += [",", self.expression(stmt.step)]
                parts += ["do", self.statements(stmt.body), "end"]
                return self.fragment(stmt.loc, parts)
            case ForGenericStatement():
                return self.fragment(
                    stmt.loc,
                    [
                        "for",
                        *commas(self.expression(v) for v in stmt.variables),
                        "in",
                        *commas(self.expression(e) for e in stmt.iterators),
                        "do",
                        self.statements(stmt.body),
                        "end",
                    ],
                )
            case LabelStatement():
                return self.fragment(stmt.loc, ["::", self.identifier(stmt.label), "::"])
            case GotoStatement():
                return self.fragment(stmt.loc, ["goto", self.identifier(stmt.label)])
            case _:
                raise UnsupportedNodeError(stmt)

    def clause(self, clause: IfClause | ElseifClause | ElseClause) -> Fragment:
        match clause:
            case IfClause():
                keyword = "if"
            case ElseifClause():
                keyword = "elseif"
            case ElseClause():
                return self.fragment(clause.loc, ["else", self.statements(clause.body)])
            case _:
                raise UnsupportedNodeError(clause)
        return self.fragment(
            clause.loc,
            [keyword, self.expression(clause.condition), "then", self.statements(clause.body)],
        )

    def function_tail(self, parameters: list[Identifier | Literal], body: list[Statement]) -> list[Chunk]:
        params = [
            Fragment(p.raw, origin=p.loc, source=self.source if p.loc else None)
            if isinstance(p, Literal)
            else self.identifier(p)
            for p in parameters
        ]
        return ["(", *commas(params), ")", self.statements(body), "end"]

    # -- expressions -----------------------------------------------------------

    def identifier(self, ident: Identifier) -> Fragment:
        if not ident.is_local:
            return self.fragment(ident.loc, [ident.name])
        short = self.session.rename(ident.name)
        return self.fragment(ident.loc, [short], name=ident.name if short != ident.name else None)

    def declared(self, target: Expression) -> Fragment:
        printed = self.expression(target)
        if isinstance(target, Identifier) and target.attribute:
            printed.add(["<", target.attribute, ">"])
        return printed

    def expression(
        self,
        expr: Expression,
        precedence: float = 0,
        direction: str | None = None,
        parent: str | None = None,
    ) -> Fragment:
        match expr:
            case Identifier():
                return self.identifier(expr)
            case Literal():
                if expr.in_parens and expr.kind is LiteralKind.VARARG:
                    return self.fragment(expr.loc, ["(", expr.raw, ")"])
                return self.fragment(expr.loc, [expr.raw])
            case BinaryExpression() | LogicalExpression():
                return self.binary(expr, precedence, direction, parent)
            case UnaryExpression():
                current = unary_precedence(expr.operator)
                parts: list[Chunk] = [expr.operator, self.expression(expr.argument, current)]
                # A unary operator on the right of `^` is always parsed greedily.
                if current < precedence and not (parent == "^" and direction == "right"):
                    parts = ["(", *parts, ")"]
                return self.fragment(expr.loc, parts)
            case CallExpression():
                parts = [self.base(expr.base), "(", *commas(self.expression(a) for a in expr.arguments), ")"]
                return self.call(expr, parts)
            case TableCallExpression():
                return self.call(expr, [self.base(expr.base), self.expression(expr.argument)])
            case StringCallExpression():
                return self.call(expr, [self.base(expr.base), self.expression(expr.argument)])
            case IndexExpression():
                return self.fragment(
                    expr.loc, [self.base(expr.base), "[", self.expression(expr.index), "]"]
                )
            case MemberExpression():
                # indexer and member name are glued on as-is: `a.b`, never `a. b`
                member = self.fragment(expr.identifier.loc, [expr.identifier.name])
                fragment = self.fragment(expr.loc, [self.base(expr.base)])
                return fragment.add([expr.indexer, member])
            case FunctionExpression():
                return self.fragment(expr.loc, ["function", *self.function_tail(expr.parameters, expr.body)])
            case TableConstructor():
                return self.table(expr)
            case _:
                raise UnsupportedNodeError(expr)

    def binary(
        self,
        expr: BinaryExpression | LogicalExpression,
        precedence: float,
        direction: str | None,
        parent: str | None,
    ) -> Fragment:
        operator = expr.operator
        current = binary_precedence(operator)
        parts: list[Chunk] = [
            self.expression(expr.left, current, "left", operator),
            operator,
            self.expression(expr.right, current, "right", operator),
        ]
        # `+` and the `*`/`/` family are treated as freely re-associable.
        if current < precedence or (
            current == precedence
            and associativity(operator) != direction
            and parent != "+"
            and not (parent == "*" and operator in ("/", "*"))
        ):
            parts = ["(", *parts, ")"]
        return self.fragment(expr.loc, parts)

    def call(
        self,
        expr: CallExpression | TableCallExpression | StringCallExpression,
        parts: list[Chunk],
    ) -> Fragment:
        if expr.in_parens:
            # (f()) keeps only the first result
            parts = ["(", *parts, ")"]
        return self.fragment(expr.loc, parts)

    def base(self, expr: Expression) -> Fragment:
        printed = self.expression(expr)
        if isinstance(expr, PARENTHESIZED_BASES) and not getattr(expr, "in_parens", False):
            return Fragment(["(", printed, ")"])
        return printed

    def table(self, expr: TableConstructor) -> Fragment:
        fields: list[Fragment] = []
        last_value = ""
        for item in expr.fields:
            match item:
                case TableKey():
                    value = self.expression(item.value)
                    parts: list[Chunk] = ["[", self.expression(item.key), "]", "=", value]
                case TableKeyString():
                    value = self.expression(item.value)
                    parts = [self.fragment(item.key.loc, [item.key.name]), "=", value]
                case TableValue():
                    value = self.expression(item.value)
                    parts = [value]
                case _:
                    raise UnsupportedNodeError(item)
            last_value = value.to_string()
            fields.append(self.fragment(item.loc, parts))
        parts = ["{", *commas(fields)]
        if fields and TRAILING_COMMA_MARKER in last_value:
            parts.append(",")
        parts.append("}")
        return self.fragment(expr.loc, parts)
