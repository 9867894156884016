"""Stateless arithmetic service behind the HTTP API."""
import math
import operator
import re
from typing import Any, Callable, Dict, List, Optional

from calcupro.common.errors import CalculatorArithmeticError, CalculatorValidationError
from calcupro.common.logger import logger
from calcupro.common.operations import (
    CalculationResult,
    ExpressionResult,
    OperationName,
    UNARY_OPERATIONS,
)
from calcupro.common.parser import ExpressionParser

# Results are rounded to 10 decimal places to hide binary floating-point noise
ROUNDING_FACTOR = 1e10

# Plain decimal literal with an optional exponent, no underscores or named values
OPERAND_PATTERN = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$", re.ASCII)

# Digits, the four operators, decimal point, parentheses and whitespace only
EXPRESSION_PATTERN = re.compile(r"^[\d+\-*/.()\s]+$", re.ASCII)


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise CalculatorArithmeticError("Division by zero")
    return a / b


def _sqrt(a: float) -> float:
    if a < 0:
        raise CalculatorArithmeticError("Cannot calculate square root of negative number")
    return math.sqrt(a)


def _power(a: float, b: float) -> float:
    try:
        result = a ** b
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        # 0 raised to a negative power
        return math.inf
    if isinstance(result, complex):
        # Negative base with a fractional exponent has no real value
        return math.nan
    return result


OPERATIONS: Dict[OperationName, Callable[..., float]] = {
    OperationName.ADD: operator.add,
    OperationName.SUBTRACT: operator.sub,
    OperationName.MULTIPLY: operator.mul,
    OperationName.DIVIDE: _divide,
    OperationName.PERCENTAGE: lambda a: a / 100,
    OperationName.NEGATE: operator.neg,
    OperationName.SQRT: _sqrt,
    OperationName.POWER: _power,
}

VALID_OPERATIONS: List[str] = [name.value for name in OPERATIONS]


def round_result(value: float) -> float:
    """
    Round a result to 10 decimal places, halves rounding up.

    :param float value: Finite result

    :return: Rounded result
    :rtype: float
    """
    scaled = value * ROUNDING_FACTOR
    if not math.isfinite(scaled):
        # Magnitude too large to carry any digit at 1e-10 resolution
        return value
    # Adding 0.5 to a float above 2**52 is itself rounded, so compare the fraction instead
    whole = math.floor(scaled)
    if scaled - whole >= 0.5:
        whole += 1
    return whole / ROUNDING_FACTOR


def parse_operand(value: Any, name: str) -> float:
    """
    Parse an operand given as a JSON number or a numeric string.

    :param Any value: Raw operand value
    :param str name: Operand name used in error messages

    :return: Operand as float
    :rtype: float
    :raises CalculatorValidationError: If the value is not a valid number
    """
    # bool is an int subclass but never a valid operand
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise CalculatorValidationError(f"{name} must be a valid number")
    if isinstance(value, str) and not OPERAND_PATTERN.match(value):
        raise CalculatorValidationError(f"{name} must be a valid number")
    try:
        number = float(value)
    except (ValueError, OverflowError):
        raise CalculatorValidationError(f"{name} must be a valid number") from None
    if math.isnan(number):
        raise CalculatorValidationError(f"{name} must be a valid number")
    return number


def _check_finite(result: float) -> float:
    if not math.isfinite(result):
        raise CalculatorArithmeticError("Result is not a finite number")
    return result


class ArithmeticService:
    """
    Validate operands and dispatch them to the fixed operation table.

    The service holds no state: every call is independent, and every failure
    is raised as a :class:`~calcupro.common.errors.CalculatorError` subclass.
    """

    def calculate(self, operation: Any, operand1: Any, operand2: Any = None) -> CalculationResult:
        """
        Apply a named operation to one or two operands.

        :param Any operation: Operation name (see :class:`OperationName`)
        :param Any operand1: First operand, number or numeric string
        :param Any operand2: Second operand, required by binary operations only

        :return: Rounded result with the echoed operation and parsed operands
        :rtype: CalculationResult
        :raises CalculatorValidationError: On missing, malformed or unknown input
        :raises CalculatorArithmeticError: On division by zero, negative square root or non-finite result
        """
        if not operation:
            raise CalculatorValidationError("Operation is required", valid_operations=VALID_OPERATIONS)

        if operand1 is None:
            raise CalculatorValidationError("operand1 is required")
        num1 = parse_operand(operand1, "operand1")

        if operation not in VALID_OPERATIONS:
            raise CalculatorValidationError(
                f"Unknown operation: {operation}", valid_operations=VALID_OPERATIONS
            )
        op_name = OperationName(operation)

        num2: Optional[float] = None
        if op_name in UNARY_OPERATIONS:
            result = OPERATIONS[op_name](num1)
        else:
            if operand2 is None:
                raise CalculatorValidationError("operand2 is required for this operation")
            num2 = parse_operand(operand2, "operand2")
            result = OPERATIONS[op_name](num1, num2)

        rounded = round_result(_check_finite(result))

        operands = f"{num1}" if num2 is None else f"{num1}, {num2}"
        logger.info(f"🧮 {op_name.value}({operands}) = {rounded}")

        return CalculationResult(result=rounded, operation=op_name, operand1=num1, operand2=num2)

    def evaluate(self, expression: Any) -> ExpressionResult:
        """
        Evaluate a flat arithmetic expression with the restricted parser.

        :param Any expression: Expression such as ``"2 * (3 + 4)"``

        :return: Rounded result with the original expression
        :rtype: ExpressionResult
        :raises CalculatorValidationError: On missing input, forbidden characters or malformed expression
        :raises CalculatorArithmeticError: On a non-finite result, division by zero included
        """
        if not isinstance(expression, str) or not expression.strip():
            raise CalculatorValidationError("Expression string is required")

        if not EXPRESSION_PATTERN.match(expression):
            raise CalculatorValidationError("Invalid characters in expression")

        try:
            result = ExpressionParser.evaluate(expression)
        except ZeroDivisionError:
            # x/0 and 0/0 have no finite value
            raise CalculatorArithmeticError("Result is not a finite number") from None
        except ValueError as exc:
            logger.debug(f"🧮❌ Rejected expression {expression!r}: {exc}")
            raise CalculatorValidationError("Invalid expression") from None

        rounded = round_result(_check_finite(result))
        logger.info(f"🧮 {expression} = {rounded}")

        return ExpressionResult(result=rounded, expression=expression)
