"""Formatting utilities shared by the expression evaluator and built-in functions."""

import re
from collections.abc import Mapping

# Leading numeric prefix, the way CSS lengths start ("16px", "-.5em", "1e3")
_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_leading_float(value: object) -> float | None:
    """Parse the numeric prefix of a value.

    Args:
        value: A number or a string such as ``"16px"`` or ``".5rem"``.

    Returns:
        The parsed float, or None when the value does not start with a number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if value is None:
        return None
    match = _LEADING_FLOAT.match(str(value))
    if match is None:
        return None
    return float(match.group(1))


def format_number(value: float) -> str:
    """Format a number without a trailing ``.0`` for whole values.

    Args:
        value: Number to format.

    Returns:
        ``"16"`` for 16.0, ``"1.25"`` for 1.25.
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def format_value(value: object) -> str | None:
    """Convert a resolved theme value to the text placed in a declaration.

    Args:
        value: Leaf value from theme data or a function result.

    Returns:
        The string form, or None when the value cannot stand in a declaration.
    """
    if value is None or isinstance(value, Mapping):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return format_number(value)
    return str(value)
