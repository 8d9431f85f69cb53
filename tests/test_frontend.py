import pytest

from luamin import frontend
from luamin.errors import LuaSyntaxError
from luamin.nodes import (
    CallExpression,
    CallStatement,
    ForNumericStatement,
    FunctionDeclaration,
    Identifier,
    Literal,
    LiteralKind,
    LocalStatement,
    MemberExpression,
    RepeatStatement,
    ReturnStatement,
    SourcePosition,
    StringCallExpression,
    TableCallExpression,
)


def test_locals_and_globals_are_told_apart():
    chunk = frontend.parse("local x = y\nprint(x)")
    declaration = chunk.body[0]
    assert isinstance(declaration, LocalStatement)
    assert declaration.variables[0].is_local
    assert not declaration.init[0].is_local
    assert chunk.globals == ["y", "print"]


def test_local_initializer_sees_outer_scope():
    chunk = frontend.parse("local x = x")
    assert chunk.globals == ["x"]
    assert chunk.body[0].variables[0].is_local


def test_repeat_condition_sees_body_locals():
    chunk = frontend.parse("repeat local done = true until done")
    loop = chunk.body[0]
    assert isinstance(loop, RepeatStatement)
    assert isinstance(loop.condition, Identifier) and loop.condition.is_local
    assert chunk.globals == []


def test_function_parameters_are_local():
    chunk = frontend.parse("function f(a) return a, b end")
    decl = chunk.body[0]
    assert isinstance(decl, FunctionDeclaration)
    assert not decl.is_local
    assert decl.parameters[0].is_local
    ret = decl.body[0]
    assert isinstance(ret, ReturnStatement)
    assert [arg.is_local for arg in ret.arguments] == [True, False]
    assert chunk.globals == ["f", "b"]


def test_method_declaration_binds_self():
    chunk = frontend.parse("function obj:m() return self end")
    decl = chunk.body[0]
    assert isinstance(decl.identifier, MemberExpression)
    assert decl.identifier.indexer == ":"
    assert decl.body[0].arguments[0].is_local
    assert chunk.globals == ["obj"]


def test_method_call_becomes_member_call():
    chunk = frontend.parse("obj:m(1)")
    statement = chunk.body[0]
    assert isinstance(statement, CallStatement)
    assert isinstance(statement.expression, CallExpression)
    assert statement.expression.base.indexer == ":"
    assert statement.expression.arguments[0].kind is LiteralKind.NUMBER


def test_numeric_for_without_step():
    chunk = frontend.parse("for i = 1, 3 do end")
    loop = chunk.body[0]
    assert isinstance(loop, ForNumericStatement)
    assert loop.step is None
    assert loop.variable.is_local


def test_string_literal_value():
    chunk = frontend.parse('local m = require("util")')
    argument = chunk.body[0].init[0].arguments[0]
    assert argument.kind is LiteralKind.STRING
    assert argument.value == "util"
    assert argument.raw == '"util"'


def test_comments_are_collected_outside_strings():
    chunk = frontend.parse('--#keep\nlocal s = "-- not a comment"\n-- drop\n')
    assert [c.raw for c in chunk.comments] == ["--#keep", "-- drop"]
    assert chunk.comments[1].loc.line == 3


def test_positions_are_recorded():
    chunk = frontend.parse("local x = 1\nlocal y = 2")
    assert chunk.body[1].variables[0].loc == SourcePosition(2, 6)


def test_syntax_errors_are_wrapped():
    with pytest.raises(LuaSyntaxError) as info:
        frontend.parse("local = = =", "bad.lua")
    assert info.value.module == "bad.lua"


def test_binding_positions_are_recovered():
    chunk = frontend.parse("local x = x")
    declaration = chunk.body[0]
    assert declaration.variables[0].loc == SourcePosition(1, 6)
    assert declaration.init[0].loc == SourcePosition(1, 10)

    loop = frontend.parse("for i = 1, 3 do end").body[0]
    assert loop.variable.loc == SourcePosition(1, 4)

    decl = frontend.parse("local function f(a, ...) end").body[0]
    assert decl.identifier.loc == SourcePosition(1, 15)
    assert [p.loc for p in decl.parameters] == [SourcePosition(1, 17), SourcePosition(1, 20)]


def test_method_and_member_names_are_located():
    decl = frontend.parse("function obj:m(a) end").body[0]
    assert decl.identifier.base.loc == SourcePosition(1, 9)
    assert decl.identifier.identifier.loc == SourcePosition(1, 13)
    assert decl.parameters[0].loc == SourcePosition(1, 15)

    call = frontend.parse("local t = {}\nt.field.x = 1").body[1].variables[0]
    assert isinstance(call, MemberExpression)
    assert call.identifier.loc == SourcePosition(2, 8)
    assert call.base.identifier.loc == SourcePosition(2, 2)


def test_parenthesized_call_and_vararg_keep_their_parens():
    ret = frontend.parse("return (f()), (...), ...").body[0]
    call, wrapped_vararg, vararg = ret.arguments
    assert isinstance(call, CallExpression) and call.in_parens
    assert call.loc is not None
    assert isinstance(wrapped_vararg, Literal) and wrapped_vararg.kind is LiteralKind.VARARG
    assert wrapped_vararg.in_parens
    assert not vararg.in_parens


def test_call_without_parentheses():
    chunk = frontend.parse('print "hi"\nf{1}\nobj:m [[x]]')
    string_call, table_call, method_call = (s.expression for s in chunk.body)
    assert isinstance(string_call, StringCallExpression)
    assert string_call.argument.raw == '"hi"'
    assert string_call.argument.loc == SourcePosition(1, 6)
    assert isinstance(table_call, TableCallExpression)
    assert isinstance(method_call, StringCallExpression)
    assert method_call.base.indexer == ":"
    assert method_call.argument.raw == "[[x]]"


def test_unary_operator_binds_tighter_than_addition():
    expr = frontend.parse("return #t + 1").body[0].arguments[0]
    assert expr.operator == "+"
    assert expr.left.operator == "#"


def test_local_attributes():
    declaration = frontend.parse("local x <const> = 1").body[0]
    assert declaration.variables[0].attribute == "const"
