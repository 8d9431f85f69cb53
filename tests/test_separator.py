import pytest

from luamin.operators import associativity, binary_precedence, unary_precedence
from luamin.separator import needs_separator, separator


@pytest.mark.parametrize(
    "before,after,expected",
    [
        ("", "a", False),
        ("a", "", False),
        ("while", "1", True),
        ("local", "x", True),
        ("x", "_y", True),
        ("end", "=", False),
        ("x", "(", False),
        ("1", "(", False),
        ("1", "+", False),
        ("1", ".", True),
        ("1", "a", True),
        ("1", "_", True),
        ("-", "-", True),
        ("-", "x", False),
        ("a.", "b", True),
        ("..", "b", False),
        ("..", "1", False),
        ("..", ".", True),
        ("[", "[", True),
        (">", "=", True),
        (">", "x", False),
        (")", "a", False),
        ('"s"', "then", False),
    ],
)
def test_needs_separator(before, after, expected):
    assert needs_separator(before, after) is expected


def test_separator_text():
    assert separator("return", "x") == " "
    assert separator("return", "{") == ""


def test_operator_table():
    assert binary_precedence("or") < binary_precedence("and") < binary_precedence("==")
    assert binary_precedence("==") < binary_precedence("..") < binary_precedence("+")
    assert binary_precedence("+") < binary_precedence("*") < unary_precedence("-")
    assert unary_precedence("not") == unary_precedence("#") == 8
    assert binary_precedence("^") == 10
    assert binary_precedence("==") < binary_precedence("|") < binary_precedence("&") < binary_precedence("..")
    assert associativity("^") == associativity("..") == "right"
    assert associativity("-") == associativity("and") == "left"
