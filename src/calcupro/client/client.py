"""HTTP client for the calculator API."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress
import requests

from calcupro.common.logger import logger
from calcupro.server.calculator import ArithmeticService


class ArithmeticApiError(Exception):
    """Raised when the API rejects a request or cannot be reached."""


class ArithmeticClient(BaseModel):
    """
    HTTP client sending calculations to the calculator API.

    The client:
    - posts single operations to ``/api/calculate``
    - posts flat expressions to ``/api/evaluate``
    - probes ``/health``
    - turns error bodies into :class:`ArithmeticApiError` carrying the server's message
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True, validate_default=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=3001, ge=1, le=65535, description="Server TCP port")
    timeout: float = Field(default=5.0, gt=0, description="Request timeout in seconds")

    @property
    def base_url(self) -> str:
        """Root URL of the API."""
        host = f"[{self.host}]" if self.host.version == 6 else str(self.host)
        return f"http://{host}:{self.port}"

    def _post(self, path: str, payload: Dict[str, Any], fallback_error: str) -> Dict[str, Any]:
        """
        Post a JSON payload and return the decoded body of a successful response.

        :param str path: API path, e.g. ``/api/calculate``
        :param dict payload: JSON body
        :param str fallback_error: Message used when the error body carries none

        :return: Decoded JSON body
        :rtype: Dict[str, Any]
        :raises ArithmeticApiError: On transport failure or non-2xx status
        """
        try:
            response = requests.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"🔌❌ API request to {path} failed: {exc}")
            raise ArithmeticApiError(fallback_error) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not 200 <= response.status_code < 300:
            message = data.get("error") if isinstance(data, dict) else None
            raise ArithmeticApiError(message or fallback_error)
        return data

    def calculate(self, operation: str, operand1: Any, operand2: Any = None) -> float:
        """
        Apply a named operation on the server.

        :param str operation: Operation name, e.g. ``"add"``
        :param Any operand1: First operand
        :param Any operand2: Second operand, omitted for unary operations

        :return: Rounded result
        :rtype: float
        :raises ArithmeticApiError: If the server rejects the calculation
        """
        payload: Dict[str, Any] = {"operation": operation, "operand1": operand1}
        if operand2 is not None:
            payload["operand2"] = operand2
        data = self._post("/api/calculate", payload, "Calculation failed")
        return float(data["result"])

    def evaluate(self, expression: str) -> float:
        """
        Evaluate a flat arithmetic expression on the server.

        :param str expression: Expression such as ``"2 + 2"``

        :return: Rounded result
        :rtype: float
        :raises ArithmeticApiError: If the server rejects the expression
        """
        data = self._post("/api/evaluate", {"expression": expression}, "Evaluation failed")
        return float(data["result"])

    def check_health(self) -> bool:
        """Return True when the API answers its health probe."""
        try:
            response = requests.get(f"{self.base_url}/health", timeout=self.timeout)
        except requests.RequestException:
            return False
        return 200 <= response.status_code < 300


class LocalArithmeticBackend:
    """In-process backend with the same interface as :class:`ArithmeticClient`, no network involved."""

    def __init__(self, service: Optional[ArithmeticService] = None) -> None:
        self.service = service or ArithmeticService()

    def calculate(self, operation: str, operand1: Any, operand2: Any = None) -> float:
        return self.service.calculate(operation, operand1, operand2).result

    def evaluate(self, expression: str) -> float:
        return self.service.evaluate(expression).result
