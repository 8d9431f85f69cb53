"""Parsing front-end: luaparser output converted to ``luamin.nodes``.

Besides the shape conversion this resolves lexical scopes, so each
identifier occurrence knows whether it names a local binding, and collects
the free names a chunk references.

luaparser 4 leaves most bare names (binding targets, member names, method
names) without tokens. Their positions are recovered from a name index of
the source, searched forward from a cursor that follows the conversion
through the text.
"""

from __future__ import annotations

import logging
import re

from luaparser import ast as lua_ast
from luaparser import astnodes

from . import nodes as n
from .comments import LineIndex, NameIndex, scan_comments
from .errors import LuaSyntaxError, UnsupportedNodeError

logger = logging.getLogger(__name__)

BINARY_OPERATORS = {
    "AddOp": "+",
    "SubOp": "-",
    "MultOp": "*",
    "FloatDivOp": "/",
    "FloorDivOp": "//",
    "ModOp": "%",
    "ExpoOp": "^",
    "BAndOp": "&",
    "BOrOp": "|",
    "BXorOp": "~",
    "BShiftROp": ">>",
    "BShiftLOp": "<<",
    "LessThanOp": "<",
    "GreaterThanOp": ">",
    "LessOrEqThanOp": "<=",
    "GreaterOrEqThanOp": ">=",
    "EqToOp": "==",
    "NotEqToOp": "~=",
    "Concat": "..",
}

LOGICAL_OPERATORS = {"AndLoOp": "and", "OrLoOp": "or"}

UNARY_OPERATORS = {
    "UMinusOp": "-",
    "UBNotOp": "~",
    "ULNotOp": "not",
    "ULengthOP": "#",
}

# Nodes whose tokens start at a tail (`.name`, `[k]`, call arguments) rather than at their base.
_TAIL_STARTED = (astnodes.Index, astnodes.Call)

_NUMBER = re.compile(r"^(0[xX][0-9a-fA-F.]+([pP][+-]?\d+)?|[0-9.]+([eE][+-]?\d+)?)$")
_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\0": "\\0"}


def quote_string(value: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in value) + '"'


def long_bracket(body: str) -> str:
    level = 0
    while "]" + "=" * level + "]" in body:
        level += 1
    eq = "=" * level
    return f"[{eq}[{body}]{eq}]"


def parse(source: str, module: str = "<string>") -> n.Chunk:
    """Parse Lua source into a located chunk with its global report."""
    try:
        tree = lua_ast.parse(source)
    except Exception as exc:  # luaparser raises several unrelated exception types
        raise LuaSyntaxError(module, str(exc)) from exc
    converter = _Converter(source)
    chunk = converter.convert_chunk(tree)
    logger.debug("parsed %s: %d statements, %d globals", module, len(chunk.body), len(chunk.globals))
    return chunk


class _Converter:
    def __init__(self, source: str) -> None:
        self.source = source
        self.index = LineIndex(source)
        self.names = NameIndex(source)
        self.cursor = 0
        self.scopes: list[set[str]] = []
        self.globals: dict[str, None] = {}

    # -- scope handling ------------------------------------------------------

    def push(self) -> None:
        self.scopes.append(set())

    def pop(self) -> None:
        self.scopes.pop()

    def declare(self, name: str) -> None:
        self.scopes[-1].add(name)

    def is_local(self, name: str) -> bool:
        return any(name in scope for scope in reversed(self.scopes))

    def reference(self, node: astnodes.Name) -> n.Identifier:
        name = node.id
        loc = self.loc(node) or self.locate(name)
        local = self.is_local(name)
        if not local:
            self.globals.setdefault(name, None)
        return n.Identifier(name, is_local=local, loc=loc)

    def binding(self, node: astnodes.Name, loc: n.SourcePosition | None = None) -> n.Identifier:
        self.declare(node.id)
        attribute = getattr(node, "attribute", None)
        return n.Identifier(
            node.id,
            is_local=True,
            loc=loc or self.loc(node) or self.locate(node.id),
            attribute=attribute.name.id if attribute is not None else None,
        )

    def member(self, node: astnodes.Name, after: int | None = None) -> n.Identifier:
        if after is not None:
            self.cursor = max(self.cursor, after)
        return n.Identifier(node.id, loc=self.loc(node) or self.locate(node.id))

    # -- positions -----------------------------------------------------------

    def loc(self, node) -> n.SourcePosition | None:
        start = getattr(node, "start_char", None)
        if start is not None:
            return self.index.position(start)
        return None

    def locate(self, name: str) -> n.SourcePosition | None:
        """Position of the next ``name`` token at or after the cursor."""
        offset = self.names.find(name, self.cursor)
        if offset is None:
            return None
        self.cursor = offset + len(name)
        return self.index.position(offset)

    def enter(self, node) -> None:
        start = getattr(node, "start_char", None)
        if start is not None and not isinstance(node, _TAIL_STARTED):
            self.cursor = max(self.cursor, start)

    def leave(self, node) -> None:
        stop = getattr(node, "stop_char", None)
        if stop is not None:
            self.cursor = max(self.cursor, stop + 1)

    def skip_to(self, text: str) -> None:
        found = self.source.find(text, self.cursor)
        if found >= 0:
            self.cursor = found

    def raw(self, node) -> str | None:
        start = getattr(node, "start_char", None)
        stop = getattr(node, "stop_char", None)
        if start is None or stop is None:
            return None
        return self.source[start : stop + 1]

    # -- blocks and statements -------------------------------------------------

    def convert_chunk(self, tree: astnodes.Chunk) -> n.Chunk:
        self.push()
        body = self.block(tree.body)
        self.pop()
        return n.Chunk(
            body=body,
            globals=list(self.globals),
            comments=scan_comments(self.source, self.index),
        )

    def block(self, block: astnodes.Block | list | None) -> list[n.Statement]:
        out: list[n.Statement] = []
        for stmt in _as_list(block):
            if stmt is None or isinstance(stmt, astnodes.SemiColon):
                continue
            self.enter(stmt)
            out.append(self.statement(stmt))
            self.leave(stmt)
        return out

    def scoped_block(self, block: astnodes.Block | list | None) -> list[n.Statement]:
        self.push()
        body = self.block(block)
        self.pop()
        return body

    def statement(self, node: astnodes.Node) -> n.Statement:
        loc = self.loc(node)
        if isinstance(node, astnodes.LocalAssign):
            # targets are located first but only come into scope after the values
            targets = [(t, self.loc(t) or self.locate(t.id)) for t in node.targets]
            init = [self.expression(v) for v in _as_list(node.values)]
            variables = [self.binding(t, at) for t, at in targets]
            return n.LocalStatement(variables, init, loc=loc)
        if isinstance(node, astnodes.Assign):
            variables = [self.expression(t) for t in node.targets]
            init = [self.expression(v) for v in _as_list(node.values)]
            return n.AssignmentStatement(variables, init, loc=loc)
        if isinstance(node, (astnodes.Call, astnodes.Invoke)):
            expression = self.expression(node)
            return n.CallStatement(expression, loc=expression.loc)
        if isinstance(node, astnodes.If):
            return n.IfStatement(self.if_clauses(node), loc=loc)
        if isinstance(node, astnodes.While):
            condition = self.expression(node.test)
            return n.WhileStatement(condition, self.scoped_block(node.body), loc=loc)
        if isinstance(node, astnodes.Do):
            return n.DoStatement(self.scoped_block(node.body), loc=loc)
        if isinstance(node, astnodes.Repeat):
            # the `until` condition sees the loop body's locals
            self.push()
            body = self.block(node.body)
            condition = self.expression(node.test)
            self.pop()
            return n.RepeatStatement(body, condition, loc=loc)
        if isinstance(node, astnodes.Return):
            return n.ReturnStatement([self.expression(v) for v in _as_list(node.values)], loc=loc)
        if isinstance(node, astnodes.Break):
            return n.BreakStatement(loc=loc)
        if isinstance(node, astnodes.Fornum):
            target = self.loc(node.target) or self.locate(node.target.id)
            start = self.expression(node.start)
            end = self.expression(node.stop)
            step = None
            if not _is_default_step(node.step, self.raw(node.step)):
                step = self.expression(node.step)
            self.push()
            variable = self.binding(node.target, target)
            body = self.block(node.body)
            self.pop()
            return n.ForNumericStatement(variable, start, end, step, body, loc=loc)
        if isinstance(node, astnodes.Forin):
            targets = [(t, self.loc(t) or self.locate(t.id)) for t in node.targets]
            iterators = [self.expression(e) for e in _as_list(node.iter)]
            self.push()
            variables = [self.binding(t, at) for t, at in targets]
            body = self.block(node.body)
            self.pop()
            return n.ForGenericStatement(variables, iterators, body, loc=loc)
        if isinstance(node, astnodes.LocalFunction):
            identifier = self.binding(node.name)
            parameters, body = self.function_body(node.args, node.body)
            return n.FunctionDeclaration(identifier, True, parameters, body, loc=loc)
        if isinstance(node, astnodes.Method):
            base = self.expression(node.source)
            method = self.member(node.name)
            identifier = n.MemberExpression(base, ":", method, loc=base.loc)
            parameters, body = self.function_body(node.args, node.body, implicit_self=True)
            return n.FunctionDeclaration(identifier, False, parameters, body, loc=loc)
        if isinstance(node, astnodes.Function):
            identifier = self.expression(node.name)
            parameters, body = self.function_body(node.args, node.body)
            return n.FunctionDeclaration(identifier, False, parameters, body, loc=loc)
        if isinstance(node, astnodes.Label):
            return n.LabelStatement(self.label(node.id), loc=loc)
        if isinstance(node, astnodes.Goto):
            return n.GotoStatement(self.label(node.label), loc=loc)
        raise UnsupportedNodeError(node)

    def label(self, node: astnodes.Name) -> n.Identifier:
        return n.Identifier(node.id, is_local=True, loc=self.loc(node) or self.locate(node.id))

    def if_clauses(self, node: astnodes.If) -> list:
        clauses: list = [
            n.IfClause(self.expression(node.test), self.scoped_block(node.body), loc=self.loc(node))
        ]
        orelse = node.orelse
        while isinstance(orelse, astnodes.ElseIf):
            self.enter(orelse)
            clauses.append(
                n.ElseifClause(
                    self.expression(orelse.test), self.scoped_block(orelse.body), loc=self.loc(orelse)
                )
            )
            orelse = orelse.orelse
        if orelse is not None:
            body = self.scoped_block(orelse)
            if body:
                clauses.append(n.ElseClause(body, loc=self.loc(orelse)))
        return clauses

    def function_body(self, args, body, implicit_self: bool = False):
        self.skip_to("(")
        self.push()
        if implicit_self:
            self.declare("self")
        parameters: list[n.Identifier | n.Literal] = []
        for arg in _as_list(args):
            if isinstance(arg, (astnodes.Varargs, astnodes.Dots)):
                self.skip_to("...")
                parameters.append(n.Literal(n.LiteralKind.VARARG, "...", loc=self.loc(arg) or self.here()))
            else:
                parameters.append(self.binding(arg))
        statements = self.block(body)
        self.pop()
        return parameters, statements

    def here(self) -> n.SourcePosition:
        return self.index.position(self.cursor)

    # -- expressions -----------------------------------------------------------

    def expression(self, node: astnodes.Node) -> n.Expression:
        self.enter(node)
        converted = self.convert(node)
        self.leave(node)
        return converted

    def convert(self, node: astnodes.Node) -> n.Expression:
        loc = self.loc(node)
        wrapped = bool(getattr(node, "wrapped", False))
        kind = type(node).__name__

        if isinstance(node, astnodes.Name):
            return self.reference(node)
        if isinstance(node, astnodes.Index):
            base = self.expression(node.value)
            if node.notation == astnodes.IndexNotation.DOT and isinstance(node.idx, astnodes.Name):
                member = self.member(node.idx, after=node.start_char)
                return n.MemberExpression(base, ".", member, loc=base.loc)
            return n.IndexExpression(base, self.expression(node.idx), loc=base.loc)
        if isinstance(node, astnodes.Invoke):
            source = self.expression(node.source)
            base = n.MemberExpression(source, ":", self.member(node.func), loc=source.loc)
            return self.call(base, node, wrapped, source.loc or loc)
        if isinstance(node, astnodes.Call):
            base = self.expression(node.func)
            return self.call(base, node, wrapped, _earliest(base.loc, loc))
        if isinstance(node, (astnodes.Dots, astnodes.Varargs)):
            return n.Literal(n.LiteralKind.VARARG, "...", in_parens=wrapped, loc=loc or self.here())
        if isinstance(node, astnodes.Nil):
            return n.Literal(n.LiteralKind.NIL, "nil", loc=loc)
        if isinstance(node, astnodes.TrueExpr):
            return n.Literal(n.LiteralKind.BOOLEAN, "true", True, loc=loc)
        if isinstance(node, astnodes.FalseExpr):
            return n.Literal(n.LiteralKind.BOOLEAN, "false", False, loc=loc)
        if isinstance(node, astnodes.Number):
            raw = self.raw(node)
            if raw is None or not _NUMBER.match(raw):
                raw = repr(node.n) if isinstance(node.n, float) else str(node.n)
            return n.Literal(n.LiteralKind.NUMBER, raw, node.n, loc=loc)
        if isinstance(node, astnodes.String):
            return self.string(node, loc)
        if isinstance(node, astnodes.AnonymousFunction):
            parameters, body = self.function_body(node.args, node.body)
            return n.FunctionExpression(parameters, body, loc=loc)
        if isinstance(node, astnodes.Table):
            return n.TableConstructor([self.field(f) for f in node.fields], loc=loc)
        if kind in LOGICAL_OPERATORS:
            return n.LogicalExpression(
                LOGICAL_OPERATORS[kind], self.expression(node.left), self.expression(node.right), loc=loc
            )
        if kind in BINARY_OPERATORS:
            return n.BinaryExpression(
                BINARY_OPERATORS[kind], self.expression(node.left), self.expression(node.right), loc=loc
            )
        if kind in UNARY_OPERATORS:
            return n.UnaryExpression(UNARY_OPERATORS[kind], self.expression(node.operand), loc=loc)
        raise UnsupportedNodeError(node)

    def call(self, base: n.Expression, node, wrapped: bool, loc: n.SourcePosition | None) -> n.Expression:
        args = _as_list(node.args)
        if node.style == astnodes.CallStyle.NO_PARENTHESIS and len(args) == 1:
            argument = self.expression(args[0])
            if isinstance(argument, n.TableConstructor):
                return n.TableCallExpression(base, argument, in_parens=wrapped, loc=loc)
            return n.StringCallExpression(base, argument, in_parens=wrapped, loc=loc)
        arguments = [self.expression(a) for a in args]
        return n.CallExpression(base, arguments, in_parens=wrapped, loc=loc)

    def string(self, node: astnodes.String, loc: n.SourcePosition | None) -> n.Literal:
        value = node.s.decode("utf-8", "replace") if isinstance(node.s, bytes) else str(node.s)
        raw = self.raw(node)
        if raw is None or not _looks_like_string(raw):
            # string call arguments carry no tokens; rebuild from the delimiter
            if node.delimiter == astnodes.StringDelimiter.DOUBLE_SQUARE:
                raw = long_bracket(node.raw)
            elif node.delimiter == astnodes.StringDelimiter.SINGLE_QUOTE:
                raw = f"'{node.raw}'"
            else:
                raw = f'"{node.raw}"'
            if loc is None:
                self.skip_to(raw[:1])
                loc = self.here()
        return n.Literal(n.LiteralKind.STRING, raw, value, loc=loc)

    def field(self, node: astnodes.Field) -> n.TableField:
        self.enter(node)
        loc = self.loc(node)
        if node.between_brackets:
            # key first: Lua evaluates `[k]=v` left to right
            converted_key = self.expression(node.key)
            return n.TableKey(converted_key, self.expression(node.value), loc=loc)
        if isinstance(node.key, astnodes.Name):
            name = self.member(node.key)
            return n.TableKeyString(name, self.expression(node.value), loc=loc)
        return n.TableValue(self.expression(node.value), loc=loc)


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, astnodes.Block):
        return value.body
    return [value]


def _earliest(*locs: n.SourcePosition | None) -> n.SourcePosition | None:
    present = [loc for loc in locs if loc is not None]
    return min(present) if present else None


def _is_default_step(step, raw: str | None) -> bool:
    # luaparser stores a plain int 1 when the loop has no explicit step
    if not isinstance(step, astnodes.Node):
        return step == 1
    return isinstance(step, astnodes.Number) and step.n == 1 and raw == "1"


def _looks_like_string(raw: str) -> bool:
    return (raw[:1] in "'\"" and raw[-1:] == raw[:1] and len(raw) >= 2) or (
        raw.startswith("[") and raw.endswith("]")
    )
