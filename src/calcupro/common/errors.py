"""Error taxonomy shared by the service, the API and the keypad."""
from typing import Any, Dict, List, Optional


class CalculatorError(ValueError):
    """Base class for every client-correctable calculator failure."""

    def __init__(self, message: str, valid_operations: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.valid_operations = valid_operations

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the JSON error body returned to API clients.

        :return: Mapping with an ``error`` key and, when known, ``validOperations``
        :rtype: Dict[str, Any]
        """
        payload: Dict[str, Any] = {"error": self.message}
        if self.valid_operations is not None:
            payload["validOperations"] = self.valid_operations
        return payload


class CalculatorValidationError(CalculatorError):
    """Malformed, missing or unknown input."""


class CalculatorArithmeticError(CalculatorError):
    """Mathematically undefined or non-finite result."""
