"""Test class ArithmeticService."""
import pytest

from calcupro.common.errors import CalculatorArithmeticError, CalculatorValidationError
from calcupro.server.calculator import (
    ArithmeticService,
    VALID_OPERATIONS,
    parse_operand,
    round_result,
)


@pytest.fixture
def service() -> ArithmeticService:
    """Provide a fresh service."""
    return ArithmeticService()


@pytest.mark.parametrize(
    "operation,operand1,operand2,expected",
    [
        ("add", 7, 3, 10.0),
        ("subtract", 2, 5, -3.0),
        ("multiply", 1.5, 4, 6.0),
        ("divide", 10, 4, 2.5),
        ("divide", 10, 3, 3.3333333333),
        ("power", 2, 10, 1024.0),
        ("power", 9, 0.5, 3.0),
        ("add", 0.1, 0.2, 0.3),  # floating-point noise is rounded away
        ("add", "1.5", "2", 3.5),  # numeric strings are accepted
    ],
)
def test_binary_operations(service, operation, operand1, operand2, expected) -> None:
    """Binary operations return the exact result rounded to 10 decimal places."""
    res = service.calculate(operation, operand1, operand2)
    assert res.result == expected
    assert res.operation.value == operation
    assert res.operand1 == float(operand1)
    assert res.operand2 == float(operand2)


@pytest.mark.parametrize(
    "operation,operand1,expected",
    [
        ("percentage", 50, 0.5),
        ("percentage", 12.5, 0.125),
        ("negate", 4, -4.0),
        ("negate", -2.5, 2.5),
        ("sqrt", 16, 4.0),
        ("sqrt", 2, 1.4142135624),
    ],
)
def test_unary_operations(service, operation, operand1, expected) -> None:
    """Unary operations only need operand1 and ignore operand2."""
    res = service.calculate(operation, operand1, 99)
    assert res.result == expected
    assert res.operand2 is None


@pytest.mark.parametrize("dividend", [0, 1, -7.5, "3", 1e300])
def test_divide_by_zero(service, dividend) -> None:
    """divide(a, 0) fails for every a."""
    with pytest.raises(CalculatorArithmeticError, match="Division by zero"):
        service.calculate("divide", dividend, 0)


@pytest.mark.parametrize("value", [-1, -0.0001, "-4", -1e10])
def test_sqrt_of_negative(service, value) -> None:
    """sqrt(a) fails with a domain error for every a < 0."""
    with pytest.raises(CalculatorArithmeticError, match="square root of negative number"):
        service.calculate("sqrt", value)


@pytest.mark.parametrize(
    "operation,operand1,operand2",
    [
        ("multiply", 1e200, 1e200),
        ("power", 10, 400),
        ("power", 0, -1),
        ("power", -8, 0.5),
        ("add", "1e400", 1),
    ],
)
def test_non_finite_results(service, operation, operand1, operand2) -> None:
    """Overflow and undefined real results are rejected."""
    with pytest.raises(CalculatorArithmeticError, match="Result is not a finite number"):
        service.calculate(operation, operand1, operand2)


@pytest.mark.parametrize("operation", [None, ""])
def test_missing_operation(service, operation) -> None:
    """A missing operation lists the valid operations."""
    with pytest.raises(CalculatorValidationError) as exc_info:
        service.calculate(operation, 1, 2)
    assert exc_info.value.message == "Operation is required"
    assert exc_info.value.valid_operations == VALID_OPERATIONS


def test_unknown_operation(service) -> None:
    """An unknown operation lists the valid operations."""
    with pytest.raises(CalculatorValidationError) as exc_info:
        service.calculate("modulo", 1, 2)
    assert exc_info.value.message == "Unknown operation: modulo"
    assert exc_info.value.valid_operations == VALID_OPERATIONS


def test_missing_operand1(service) -> None:
    """operand1 is always required."""
    with pytest.raises(CalculatorValidationError, match="operand1 is required"):
        service.calculate("negate", None)


@pytest.mark.parametrize("operand1", ["abc", "", True, [1], "nan", "1_000", "infinity"])
def test_invalid_operand1(service, operand1) -> None:
    """Non-numeric operand1 values are rejected."""
    with pytest.raises(CalculatorValidationError, match="operand1 must be a valid number"):
        service.calculate("add", operand1, 1)


def test_missing_operand2(service) -> None:
    """Binary operations require operand2."""
    with pytest.raises(CalculatorValidationError, match="operand2 is required for this operation"):
        service.calculate("add", 1)


def test_invalid_operand2(service) -> None:
    """Non-numeric operand2 values are rejected."""
    with pytest.raises(CalculatorValidationError, match="operand2 must be a valid number"):
        service.calculate("power", 2, "two")


def test_operand1_checked_before_operation_name(service) -> None:
    """A bad operand1 is reported before an unknown operation."""
    with pytest.raises(CalculatorValidationError, match="operand1 is required"):
        service.calculate("modulo", None)


@pytest.mark.parametrize(
    "value,expected",
    [
        (1.23456789014, 1.2345678901),
        (1.23456789016, 1.2345678902),
        (2.5, 2.5),
        (-0.00000000004, 0.0),
        (1e300, 1e300),  # too large to scale, returned untouched
        ((2**52 + 1) / 1e10, 4503599627370497 / 1e10),  # odd scaled value above 2**52
    ],
)
def test_round_result(value, expected) -> None:
    """Results are rounded to 10 decimal places."""
    assert round_result(value) == expected


def test_parse_operand_accepts_padded_strings() -> None:
    """Surrounding whitespace is tolerated in numeric strings."""
    assert parse_operand(" 42 ", "operand1") == 42.0


@pytest.mark.parametrize(
    "expression,expected",
    [
        ("2+2", 4.0),
        ("10/3", 3.3333333333),
        ("2 * (3 + 4)", 14.0),
        ("  1.5 * 2 ", 3.0),
        ("-3 + 5", 2.0),
        ("0.1 + 0.2", 0.3),
    ],
)
def test_evaluate(service, expression, expected) -> None:
    """Expressions honour precedence and grouping and are rounded."""
    res = service.evaluate(expression)
    assert res.result == expected
    assert res.expression == expression


@pytest.mark.parametrize(
    "expression",
    ["abs(1)", "1; 2", "__import__('os')", "2 % 3", "x + 1", "1e5", "[1]"],
)
def test_evaluate_rejects_invalid_characters(service, expression) -> None:
    """Any character outside digits, + - * / . ( ) and whitespace is rejected."""
    with pytest.raises(CalculatorValidationError, match="Invalid characters in expression"):
        service.evaluate(expression)


@pytest.mark.parametrize("expression", [None, "", "   ", 42])
def test_evaluate_requires_expression(service, expression) -> None:
    """A missing, blank or non-string expression is rejected."""
    with pytest.raises(CalculatorValidationError, match="Expression string is required"):
        service.evaluate(expression)


@pytest.mark.parametrize("expression", ["2 +", "(1", "1..2", "3 4", "2 ** 3"])
def test_evaluate_malformed(service, expression) -> None:
    """Malformed expressions report a generic error."""
    with pytest.raises(CalculatorValidationError, match="Invalid expression"):
        service.evaluate(expression)


@pytest.mark.parametrize("expression", ["5 / (1 - 1)", "0/0"])
def test_evaluate_division_by_zero(service, expression: str) -> None:
    """Division by zero inside an expression has no finite result."""
    with pytest.raises(CalculatorArithmeticError, match="Result is not a finite number"):
        service.evaluate(expression)


def test_evaluate_non_finite(service) -> None:
    """Overflowing expressions are rejected."""
    with pytest.raises(CalculatorArithmeticError, match="Result is not a finite number"):
        service.evaluate("9" * 400 + " * 2")
