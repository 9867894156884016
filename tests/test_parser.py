"""Test class ExpressionParser."""

import pytest

from calcupro.common.parser import ExpressionParser


def test_tokenize_basic():
    """Tokenize splits a simple expression into correct tokens."""
    expr = "3 + 4 * 2"
    tokens = ExpressionParser.tokenize(expr)
    assert tokens == ["3", "+", "4", "*", "2"]


def test_tokenize_without_spaces():
    """Whitespace between tokens is optional."""
    assert ExpressionParser.tokenize("(1.5+2)*3") == ["(", "1.5", "+", "2", ")", "*", "3"]


@pytest.mark.parametrize("expr,expected", [
    ("-3", ["u-", "3"]),
    ("2*-3", ["2", "*", "u-", "3"]),
    ("(-1)", ["(", "u-", "1", ")"]),
    ("4 - -1", ["4", "-", "u-", "1"]),
    ("+2", ["u+", "2"]),
])
def test_tokenize_prefix_signs(expr, expected):
    """A sign at the start, after an operator or after '(' is a prefix sign."""
    assert ExpressionParser.tokenize(expr) == expected


def test_tokenize_rejects_identifiers():
    """Letters never form tokens, so names and calls cannot be expressed."""
    with pytest.raises(ValueError):
        ExpressionParser.tokenize("abs(1)")


@pytest.mark.parametrize("token,expected", [
    ("123", True),
    ("45.67", True),
    ("-8.9", True),
    ("abc", False),
    ("+", False),
    ("1.2.3", False),
])
def test_is_number(token, expected):
    """_is_number correctly identifies numbers."""
    assert ExpressionParser._is_number(token) == expected


def test_to_rpn_basic():
    """to_rpn converts tokens to correct Reverse Polish Notation."""
    tokens = ["3", "+", "4", "*", "2"]
    rpn = ExpressionParser.to_rpn(tokens)
    # Numbers in order, operators according to precedence
    assert rpn == ["3", "4", "2", "*", "+"]


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", ["3", "4", "+"]),
    ("3 + 4 * 2", ["3", "4", "2", "*", "+"]),
    ("10 / 2 - 1", ["10", "2", "/", "1", "-"]),
    ("2 * (3 + 4)", ["2", "3", "4", "+", "*"]),
    ("-2 * 3", ["2", "u-", "3", "*"]),
])
def test_to_rpn_various(expr, expected):
    """to_rpn handles precedence, grouping and prefix signs."""
    tokens = ExpressionParser.tokenize(expr)
    rpn = ExpressionParser.to_rpn(tokens)
    assert rpn == expected


@pytest.mark.parametrize("tokens", [
    ["(", "1", "+", "2"],
    ["1", "+", "2", ")"],
])
def test_to_rpn_mismatched_parentheses(tokens):
    """Unbalanced parentheses are rejected."""
    with pytest.raises(ValueError, match="Mismatched parentheses"):
        ExpressionParser.to_rpn(tokens)


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", 7.0),
    ("10 - 2", 8.0),
    ("3 * 5", 15.0),
    ("8 / 2", 4.0),
    ("3 + 4 * 2", 11.0),  # tests precedence
    ("7 + 3 * 2 - 4 / 2", 11.0),
    ("(3 + 4) * 2", 14.0),
    ("((2))", 2.0),
    ("10 - 4 - 3", 3.0),  # left associativity
    ("16 / 4 / 2", 2.0),
    ("-(2 + 3)", -5.0),
    ("2 * -3", -6.0),
    ("4 - -1", 5.0),
    (".5 + 1.", 1.5),
])
def test_evaluate_valid(expr, expected):
    """Evaluate returns correct result for valid expressions."""
    result = ExpressionParser.evaluate(expr)
    assert result == expected


@pytest.mark.parametrize("expr", [
    "3 +",        # Trailing operator
    "* 3",        # Leading binary operator
    "3 *",        # Single number with trailing operator
    "3 4 + 5",    # Extra operand remaining
    "",           # Empty expression
    "   ",        # Blank expression
    "()",         # Empty group
    "2 (3)",      # Missing operator before a group
    "1.2.3",      # Malformed literal
    ".",          # Lone decimal point
    "(1 + 2",     # Unclosed group
    "-",          # Sign without operand
])
def test_evaluate_invalid_expression(expr):
    """Evaluate raises ValueError for malformed expressions."""
    with pytest.raises(ValueError):
        ExpressionParser.evaluate(expr)


def test_evaluate_division_by_zero():
    """Division by zero propagates as ZeroDivisionError."""
    with pytest.raises(ZeroDivisionError):
        ExpressionParser.evaluate("1 / (2 - 2)")
