"""Parse and evaluate flat arithmetic expressions safely."""
from collections.abc import Callable as ABCCallable
import operator
from typing import Callable, List, Optional, Tuple


# Type alias for binary operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Mapping of binary operator symbols to (precedence, function)
OPERATORS: dict[str, Tuple[int, OperatorFn]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, operator.truediv),
}

# Prefix signs bind tighter than any binary operator
UNARY_OPERATORS: dict[str, Tuple[int, Callable[[float], float]]] = {
    "u+": (3, operator.pos),
    "u-": (3, operator.neg),
}

PARENTHESES = ("(", ")")
NUMBER_CHARS = frozenset("0123456789.")


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Grammar limited to decimal literals, + - * /, prefix signs and parentheses

    Algorithm:
        1. Scan characters into number, operator and parenthesis tokens
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack

    A ``+`` or ``-`` found at the start, after an operator or after ``(`` is a
    prefix sign and becomes the ``u+``/``u-`` token.

    Examples:
        - Infix expression: 2 * (3 + 4)
        - Corresponding RPN: 2 3 4 + *
    """

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split an arithmetic expression into tokens.

        Whitespace between tokens is optional (e.g. "3+4*2" and "3 + 4 * 2" give the same tokens).

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[str]
        :raises ValueError: If the expression contains an unsupported character
        """
        tokens: List[str] = []
        i = 0
        while i < len(expr):
            char = expr[i]
            if char.isspace():
                i += 1
                continue

            if char in NUMBER_CHARS:
                # Consume the whole literal, validity is checked by to_rpn
                start = i
                while i < len(expr) and expr[i] in NUMBER_CHARS:
                    i += 1
                tokens.append(expr[start:i])
                continue

            if char in OPERATORS:
                previous: Optional[str] = tokens[-1] if tokens else None
                if char in "+-" and (previous is None or not ExpressionParser._is_operand_end(previous)):
                    tokens.append(f"u{char}")
                else:
                    tokens.append(char)
            elif char in PARENTHESES:
                tokens.append(char)
            else:
                raise ValueError(f"Unsupported character {char!r} in expression")
            i += 1

        return tokens

    @staticmethod
    def _is_operand_end(token: str) -> bool:
        """Return True if a binary operator may follow the token."""
        return token == ")" or ExpressionParser._is_number(token)

    @staticmethod
    def _is_number(token: str) -> bool:
        """
        Determine if a token represents a numeric value.

        Supports both integers and floating-point numbers.

        :param str token: Token string

        :return: True if token can be converted to float, else False
        :rtype: bool
        """
        try:
            float(token)
            return True
        except ValueError:
            return False

    @staticmethod
    def _precedence(token: str) -> int:
        if token in OPERATORS:
            return OPERATORS[token][0]
        return UNARY_OPERATORS[token][0]

    @staticmethod
    def to_rpn(tokens: List[str]) -> List[str]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        :param List[str] tokens: List of arithmetic tokens

        :return: List of tokens in RPN order
        :rtype: List[str]
        :raises ValueError: On an invalid literal or mismatched parentheses
        """
        output: List[str] = []
        stack: List[str] = []

        for token in tokens:
            if ExpressionParser._is_number(token):
                # Numbers are added directly to the output
                output.append(token)
            elif token in UNARY_OPERATORS or token == "(":
                # Prefix operators and groups wait for their operand
                stack.append(token)
            elif token == ")":
                while stack and stack[-1] != "(":
                    output.append(stack.pop())
                if not stack:
                    raise ValueError("Mismatched parentheses")
                stack.pop()
            elif token in OPERATORS:
                # Left-associative: pop operators with higher or equal precedence
                prec = OPERATORS[token][0]
                while stack and stack[-1] != "(" and ExpressionParser._precedence(stack[-1]) >= prec:
                    output.append(stack.pop())
                stack.append(token)
            else:
                raise ValueError(f"Invalid token: {token!r}")

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if token == "(":
                raise ValueError("Mismatched parentheses")
            output.append(token)
        return output

    @staticmethod
    def evaluate(expr: str) -> float:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises ValueError: If expression is invalid or malformed
        :raises ZeroDivisionError: If the expression divides by zero
        """
        tokens: List[str] = ExpressionParser.tokenize(expr)

        if not tokens:
            raise ValueError("Empty expression")

        rpn: List[str] = ExpressionParser.to_rpn(tokens)

        # Evaluate RPN using a stack
        stack: List[float] = []
        for token in rpn:
            if ExpressionParser._is_number(token):
                stack.append(float(token))
            elif token in UNARY_OPERATORS:
                if not stack:
                    raise ValueError(f"Invalid expression (sign without operand): {expr}")
                stack.append(UNARY_OPERATORS[token][1](stack.pop()))
            else:
                # Operator requires two operands
                if len(stack) < 2:
                    raise ValueError(f"Invalid expression (not enough operands): {expr}")
                b: float = stack.pop()
                a: float = stack.pop()
                stack.append(OPERATORS[token][1](a, b))

        if len(stack) != 1:
            raise ValueError(f"Invalid expression (remaining operands): {expr}")

        return stack[0]
