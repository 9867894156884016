"""
Terminal keypad for the calculator.

Each input line holds whitespace-separated keys or button labels, e.g.::

    7 + 3 =
    AC
    12.5 × 4 Enter

Named keys (``Enter``, ``Escape``, ``Backspace``) and button labels
(``AC``, ``CE``, ``±``, ``÷``...) are pressed as a whole; any other token is
typed character by character. The display is printed after every line.
"""

import argparse
import sys
from typing import List, Optional, TextIO

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, ValidationError

from calcupro.client.client import ArithmeticClient, LocalArithmeticBackend
from calcupro.client.keypad import BUTTON_LAYOUT, Calculator
from calcupro.common.logger import configure_logging, logger

NAMED_KEYS = ("Enter", "Escape", "Backspace")
BUTTON_LABELS = frozenset(label for row in BUTTON_LAYOUT for label in row)


class KeypadArgs(BaseModel):
    """Validated command-line arguments of the keypad."""

    model_config = ConfigDict(validate_default=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="API host address")
    port: int = Field(default=3001, ge=1, le=65535, description="API TCP port")
    local: bool = Field(default=False, description="Evaluate in-process instead of calling the API")


def parse_args(argv: Optional[List[str]] = None) -> KeypadArgs:
    """
    Parse and validate command-line arguments.

    :return: Validated CLI arguments
    :rtype: KeypadArgs
    """
    parser = argparse.ArgumentParser(description="CalcuPro terminal keypad")
    parser.add_argument("--host", default="127.0.0.1", help="API host address")
    parser.add_argument("--port", default=3001, help="API TCP port")
    parser.add_argument("--local", action="store_true", help="Compute in-process, without the API")

    args = parser.parse_args(argv)

    try:
        return KeypadArgs(host=args.host, port=args.port, local=args.local)
    except ValidationError as exc:
        parser.error(str(exc))


def feed_line(calculator: Calculator, line: str) -> None:
    """
    Press every key of one input line.

    :param Calculator calculator: Calculator receiving the keys
    :param str line: Whitespace-separated keys or button labels
    """
    for token in line.split():
        if token in NAMED_KEYS:
            calculator.handle_key(token)
        elif token in BUTTON_LABELS:
            calculator.press_button(token)
        else:
            for char in token:
                if not calculator.handle_key(char).handled:
                    logger.warning(f"⌨️ Ignoring unknown key {char!r}")


def run(calculator: Calculator, stdin: TextIO, stdout: TextIO) -> None:
    """Read key lines until end of input, printing the display after each one."""
    for line in stdin:
        feed_line(calculator, line)
        stdout.write(calculator.render() + "\n\n")
        stdout.flush()


def main(argv: Optional[List[str]] = None) -> None:
    """Start the keypad on standard input and output."""
    configure_logging()
    args = parse_args(argv)

    if args.local:
        backend = LocalArithmeticBackend()
    else:
        backend = ArithmeticClient(host=args.host, port=args.port)
        if backend.check_health():
            logger.info(f"🔌✅ API connected at {backend.base_url}")
        else:
            logger.warning(f"🔌❌ API offline at {backend.base_url}")

    run(Calculator(backend), sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
