"""Pydantic models for calculator requests, results and errors."""
from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

# Operands arrive as JSON numbers or numeric strings; the service parses them
Operand = Any


class OperationName(str, Enum):
    """Operations known to the arithmetic service."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    PERCENTAGE = "percentage"
    NEGATE = "negate"
    SQRT = "sqrt"
    POWER = "power"


UNARY_OPERATIONS = frozenset({OperationName.PERCENTAGE, OperationName.NEGATE, OperationName.SQRT})


class CalculationRequest(BaseModel):
    """
    Body of ``POST /api/calculate``.

    Fields are deliberately loose so missing or non-numeric values reach the
    service, which answers with its own error messages.
    """

    operation: Any = Field(default=None, description="Operation name")
    operand1: Operand = Field(default=None, description="First operand")
    operand2: Operand = Field(default=None, description="Second operand, binary operations only")


class CalculationResult(BaseModel):
    """Represents the result of a single arithmetic operation."""

    result: float = Field(..., description="Result rounded to 10 decimal places")
    operation: OperationName = Field(..., description="Operation that was applied")
    operand1: float = Field(..., description="Parsed first operand")
    operand2: Optional[float] = Field(default=None, description="Parsed second operand")


class ExpressionRequest(BaseModel):
    """Body of ``POST /api/evaluate``."""

    expression: Any = Field(default=None, description="Flat arithmetic expression")


class ExpressionResult(BaseModel):
    """Represents the result of an evaluated arithmetic expression."""

    result: float = Field(..., description="Result rounded to 10 decimal places")
    expression: str = Field(..., description="Original arithmetic expression")


class ErrorResponse(BaseModel):
    """Body of every 400 response."""

    error: str
    validOperations: Optional[List[str]] = None


class HealthStatus(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: datetime
