"""Calculator keypad state machine."""
from decimal import Decimal
import functools
import re
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict, Field

from calcupro.client.client import ArithmeticApiError
from calcupro.common.errors import CalculatorError, CalculatorValidationError
from calcupro.common.logger import logger

DIGITS = "0123456789"
ERROR_DISPLAY = "Error"
LOADING_DISPLAY = "..."
EXPONENT_ZEROS = re.compile(r"e([+-])0+(\d)")

# Display symbols of the binary operators and the API operation they stand for
OPERATOR_OPERATIONS: Dict[str, str] = {
    "+": "add",
    "−": "subtract",
    "×": "multiply",
    "÷": "divide",
}

# ASCII spellings accepted for the display symbols
OPERATOR_ALIASES: Dict[str, str] = {"-": "−", "*": "×", "/": "÷", "x": "×"}

# Keyboard keys mapped to operator symbols
KEY_OPERATORS: Dict[str, str] = {"+": "+", "-": "−", "*": "×", "/": "÷"}

BUTTON_LAYOUT: Tuple[Tuple[str, ...], ...] = (
    ("AC", "CE", "%", "÷"),
    ("7", "8", "9", "×"),
    ("4", "5", "6", "−"),
    ("1", "2", "3", "+"),
    ("±", "0", ".", "="),
)

CALL_ERRORS = (CalculatorError, ArithmeticApiError)


class ArithmeticBackend(Protocol):
    """Anything able to run a named operation: the HTTP client or the in-process backend."""

    def calculate(self, operation: str, operand1: Any, operand2: Any = None) -> float:
        ...


class CalculatorState(BaseModel):
    """
    Snapshot of the calculator display and pending work.

    Instances are immutable: every transition replaces the state with an updated copy.
    """

    model_config = ConfigDict(frozen=True)

    display: str = Field(default="0", description="Current entry")
    previous_value: Optional[float] = Field(default=None, description="Left operand of the pending operator")
    pending_operator: Optional[str] = Field(default=None, description="Operator symbol awaiting its right operand")
    waiting_for_operand: bool = Field(default=False, description="Next digit starts a fresh entry")
    history: str = Field(default="", description="Expression shown above the display")
    is_loading: bool = Field(default=False, description="An arithmetic call is in flight")
    error: Optional[str] = Field(default=None, description="Message of the last failed interaction")


class KeyOutcome(NamedTuple):
    handled: bool
    prevent_default: bool = False


def format_number(value: float) -> str:
    """
    Format a number the way a browser prints it.

    Integral values lose their fractional part ("10", not "10.0") and values
    between 1e-7 and 1e21 are written without an exponent.

    :param float value: Number to format

    :return: Display text
    :rtype: str
    """
    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude >= 1e21 or magnitude < 1e-7:
        # Exponent digits carry no leading zeros ("1e-8", not "1e-08")
        return EXPONENT_ZEROS.sub(r"e\1\2", repr(value))
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _unless_loading(method: Callable) -> Callable:
    """Ignore input while an arithmetic call is in flight."""

    @functools.wraps(method)
    def wrapper(self: "Calculator", *args, **kwargs):
        if self.state.is_loading:
            logger.debug(f"⌛ Ignoring {method.__name__} while loading")
            return None
        return method(self, *args, **kwargs)

    return wrapper


class Calculator:
    """
    Keypad calculator driving an arithmetic backend.

    States:
        - entering: digits are appended to the display
        - waiting for operand: an operator was chosen, the next digit starts a new entry

    Binary operators are resolved by the backend when the next operator or
    equals is pressed, so ``7 + 3 × 2 =`` gives 20, like a pocket calculator.
    """

    def __init__(self, backend: ArithmeticBackend) -> None:
        self.backend = backend
        self.state = CalculatorState()

    def _update(self, **changes: Any) -> None:
        self.state = self.state.model_copy(update=changes)

    def _read_display(self) -> float:
        try:
            return float(self.state.display)
        except ValueError:
            raise CalculatorValidationError("Display does not hold a valid number") from None

    def _call(self, operation: str, operand1: float, operand2: Optional[float] = None) -> float:
        """Run one backend call with the loading flag raised for its duration."""
        self._update(is_loading=True)
        try:
            return self.backend.calculate(operation, operand1, operand2)
        finally:
            self._update(is_loading=False)

    @staticmethod
    def _normalize_operator(symbol: str) -> str:
        symbol = OPERATOR_ALIASES.get(symbol, symbol)
        if symbol not in OPERATOR_OPERATIONS:
            raise ValueError(f"Unknown operator: {symbol!r}")
        return symbol

    @_unless_loading
    def press_digit(self, digit: str) -> None:
        if len(digit) != 1 or digit not in DIGITS:
            raise ValueError(f"Not a digit: {digit!r}")
        state = self.state
        if state.waiting_for_operand:
            self._update(display=digit, waiting_for_operand=False, error=None)
        elif state.display in ("0", ERROR_DISPLAY):
            self._update(display=digit, error=None)
        else:
            self._update(display=state.display + digit, error=None)

    @_unless_loading
    def press_decimal(self) -> None:
        state = self.state
        if state.waiting_for_operand or state.display == ERROR_DISPLAY:
            self._update(display="0.", waiting_for_operand=False, error=None)
        elif "." not in state.display:
            self._update(display=state.display + ".", error=None)
        else:
            self._update(error=None)

    @_unless_loading
    def press_operator(self, symbol: str) -> None:
        """
        Choose the next binary operator, resolving the pending one first when a new operand was entered.

        A failed resolution shows the error indicator but keeps the previous
        value and history as they were.
        """
        symbol = self._normalize_operator(symbol)
        self._update(error=None)
        state = self.state

        if state.previous_value is None:
            try:
                value = self._read_display()
            except CalculatorValidationError as exc:
                self._update(error=str(exc))
            else:
                self._update(previous_value=value, history=f"{format_number(value)} {symbol}")
        elif state.pending_operator and not state.waiting_for_operand:
            try:
                current = self._read_display()
                result = self._call(OPERATOR_OPERATIONS[state.pending_operator], state.previous_value, current)
            except CALL_ERRORS as exc:
                self._update(display=ERROR_DISPLAY, error=str(exc))
            else:
                self._update(
                    display=format_number(result),
                    previous_value=result,
                    history=f"{format_number(result)} {symbol}",
                )
        else:
            # Operator replaced before a new operand was entered
            self._update(history=f"{format_number(state.previous_value)} {symbol}")

        self._update(waiting_for_operand=True, pending_operator=symbol)

    @_unless_loading
    def press_equals(self) -> None:
        state = self.state
        if state.pending_operator is None or state.previous_value is None or state.waiting_for_operand:
            return

        self._update(error=None)
        try:
            current = self._read_display()
            result = self._call(OPERATOR_OPERATIONS[state.pending_operator], state.previous_value, current)
        except CALL_ERRORS as exc:
            self._update(display=ERROR_DISPLAY, error=str(exc))
            return

        self._update(
            history=f"{format_number(state.previous_value)} {state.pending_operator} {format_number(current)} =",
            display=format_number(result),
            previous_value=None,
            pending_operator=None,
            waiting_for_operand=True,
        )

    @_unless_loading
    def clear(self) -> None:
        """AC: full reset."""
        self.state = CalculatorState()

    @_unless_loading
    def clear_entry(self) -> None:
        """CE: reset the current entry only."""
        self._update(display="0", error=None)

    def _apply_unary(self, operation: str) -> None:
        self._update(error=None)
        try:
            result = self._call(operation, self._read_display())
        except CALL_ERRORS as exc:
            self._update(error=str(exc))
            return
        self._update(display=format_number(result))

    @_unless_loading
    def toggle_sign(self) -> None:
        self._apply_unary("negate")

    @_unless_loading
    def percentage(self) -> None:
        self._apply_unary("percentage")

    @_unless_loading
    def backspace(self) -> None:
        display = self.state.display
        if display == ERROR_DISPLAY or len(display) == 1 or (len(display) == 2 and display[0] == "-"):
            self._update(display="0", error=None)
        else:
            self._update(display=display[:-1], error=None)

    def press_button(self, label: str) -> None:
        """
        Press an on-screen button by its label (see ``BUTTON_LAYOUT``).

        :param str label: Button label, e.g. ``"7"``, ``"÷"`` or ``"AC"``
        :raises ValueError: If no button carries the label
        """
        actions: Dict[str, Callable[[], None]] = {
            "AC": self.clear,
            "CE": self.clear_entry,
            "%": self.percentage,
            "±": self.toggle_sign,
            ".": self.press_decimal,
            "=": self.press_equals,
        }
        if label in actions:
            actions[label]()
        elif label in OPERATOR_OPERATIONS:
            self.press_operator(label)
        elif len(label) == 1 and label in DIGITS:
            self.press_digit(label)
        else:
            raise ValueError(f"Unknown button: {label!r}")

    def handle_key(self, key: str) -> KeyOutcome:
        """
        Map a keyboard key to the matching button.

        ``/`` also asks the caller to suppress the key's default action.

        :param str key: Key name as reported by the keyboard (``"7"``, ``"Enter"``, ...)

        :return: Whether the key was handled and whether its default action must be suppressed
        :rtype: KeyOutcome
        """
        if len(key) == 1 and key in DIGITS:
            self.press_digit(key)
        elif key == ".":
            self.press_decimal()
        elif key in KEY_OPERATORS:
            self.press_operator(KEY_OPERATORS[key])
            return KeyOutcome(handled=True, prevent_default=key == "/")
        elif key in ("Enter", "="):
            self.press_equals()
        elif key == "Escape":
            self.clear()
        elif key == "Backspace":
            self.backspace()
        elif key == "%":
            self.percentage()
        else:
            return KeyOutcome(handled=False)
        return KeyOutcome(handled=True)

    def render(self) -> str:
        """
        Render the display panel as text.

        :return: History line, main line and, after a failure, the error message
        :rtype: str
        """
        lines: List[str] = [self.state.history]
        lines.append(LOADING_DISPLAY if self.state.is_loading else self.state.display)
        if self.state.error:
            lines.append(self.state.error)
        return "\n".join(lines)
