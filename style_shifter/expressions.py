"""Marker expression parsing and evaluation.

An expression is either a property path (``demo.colors.primary``) or a
function call (``tint(demo.bg, #fff, 20%)``). Call arguments are parsed into
a small tree of nodes and evaluated bottom-up, innermost calls first.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from style_shifter.formatters import format_value
from style_shifter.functions import FunctionRegistry
from style_shifter.logger import get_logger
from style_shifter.variables import RESERVED_VALUE_NAME, VariableScopes

if TYPE_CHECKING:
    from style_shifter.theme import Theme

logger = get_logger(__name__)

_CALL_NAME = re.compile(r"^([A-Za-z_][\w-]*)\s*\(")
_VARIABLE_REF = re.compile(r"^%([\w-]+)%$")
_PROPERTY_PATH = re.compile(r"^[A-Za-z_][\w-]*(?:\.[\w-]+)+$")

_OPENERS = "([{"
_CLOSERS = ")]}"
_QUOTES = "'\""


class ExpressionSyntaxError(ValueError):
    """Raised when an expression has unbalanced brackets or quotes."""


@dataclass(frozen=True)
class Literal:
    """Plain text argument, with surrounding quotes removed."""

    text: str


@dataclass(frozen=True)
class VariableRef:
    """A ``%name%`` reference to a local, global or the original value."""

    name: str
    text: str


@dataclass(frozen=True)
class PropertyPath:
    """A dotted path whose first segment must be the theme namespace."""

    segments: tuple[str, ...]
    text: str


@dataclass(frozen=True)
class FunctionCall:
    """A ``name(arg, ...)`` call."""

    name: str
    args: tuple[Node, ...]
    text: str


Node = Literal | VariableRef | PropertyPath | FunctionCall


def split_arguments(text: str) -> list[str]:
    """Split an argument list on top-level commas.

    Commas nested in ``()``, ``[]``, ``{}`` or quotes do not split. Each piece
    is trimmed; a trailing empty piece is dropped.

    Args:
        text: Text between the call's parentheses.

    Returns:
        The raw argument strings.

    Raises:
        ExpressionSyntaxError: If brackets or quotes are unbalanced.
    """
    args: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None

    for char in text:
        if quote is not None:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth < 0:
                msg = f"Unbalanced {char!r} in arguments: {text!r}"
                raise ExpressionSyntaxError(msg)
        elif char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    if quote is not None or depth != 0:
        msg = f"Unterminated group in arguments: {text!r}"
        raise ExpressionSyntaxError(msg)

    last = "".join(current).strip()
    if last:
        args.append(last)
    return args


def _closing_paren(text: str, open_index: int) -> int:
    """Find the parenthesis matching the one at ``open_index``, or -1."""
    depth = 0
    quote: str | None = None
    for index in range(open_index, len(text)):
        char = text[index]
        if quote is not None:
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _parse_call(text: str) -> FunctionCall | None:
    match = _CALL_NAME.match(text)
    if match is None:
        return None
    open_index = match.end() - 1
    if _closing_paren(text, open_index) != len(text) - 1:
        return None
    raw_args = split_arguments(text[open_index + 1 : -1])
    return FunctionCall(
        name=match.group(1),
        args=tuple(parse_argument(raw) for raw in raw_args),
        text=text,
    )


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def parse_argument(text: str) -> Node:
    """Parse one raw argument into a node.

    Args:
        text: Trimmed argument text.

    Returns:
        The node for the argument.
    """
    call = _parse_call(text)
    if call is not None:
        return call
    variable = _VARIABLE_REF.match(text)
    if variable is not None:
        return VariableRef(name=variable.group(1), text=text)
    if _PROPERTY_PATH.match(text):
        return PropertyPath(segments=tuple(text.split(".")), text=text)
    return Literal(text=_unquote(text))


def parse_expression(expression: str) -> FunctionCall | PropertyPath:
    """Parse the text of a marker.

    Args:
        expression: Text between ``/*![`` and ``]*/``.

    Returns:
        A FunctionCall, or a PropertyPath for anything that is not a call.

    Raises:
        ExpressionSyntaxError: If a call's argument list is malformed.
    """
    text = expression.strip()
    call = _parse_call(text)
    if call is not None:
        return call
    return PropertyPath(segments=tuple(text.split(".")), text=text)


def resolve_path(theme: Theme, segments: Sequence[str]) -> tuple[bool, object]:
    """Walk theme data along a namespace-qualified path.

    Args:
        theme: Theme whose data is traversed.
        segments: Path segments; the first must equal the theme namespace.

    Returns:
        Tuple of (found, value).
    """
    if not segments or segments[0] != theme.namespace:
        return False, None
    value: object = theme.data
    for segment in segments[1:]:
        if not isinstance(value, Mapping) or segment not in value:
            return False, None
        value = value[segment]
    return True, value


class ExpressionEvaluator:
    """Resolves marker expressions against a theme."""

    def __init__(
        self,
        functions: FunctionRegistry,
        variables: VariableScopes,
        value_reader: Callable[[str, int], str | None],
    ) -> None:
        """Initialize the evaluator.

        Args:
            functions: Registry used to resolve call names.
            variables: Local and shared variable stores.
            value_reader: Returns the original declaration value at a marker position.
        """
        self.functions = functions
        self.variables = variables
        self.value_reader = value_reader

    def evaluate(self, expression: str, theme: Theme, source: str, position: int) -> str | None:
        """Evaluate one marker expression.

        Args:
            expression: Marker expression text.
            theme: Active theme.
            source: Full style-sheet text.
            position: Offset of the marker in ``source``.

        Returns:
            The resolved text, or None for "no result".
        """
        try:
            node = parse_expression(expression)
        except ExpressionSyntaxError as exc:
            logger.warning(f"Skipping malformed expression: {exc}")
            return None

        if isinstance(node, PropertyPath):
            found, value = resolve_path(theme, node.segments)
            return format_value(value) if found else None

        fn = self.functions.get(node.name)
        if fn is None:
            logger.debug(f"Unknown function {node.name!r} in {expression!r}")
            return None
        try:
            args = [self._resolve(arg, theme, source, position) for arg in node.args]
            result = fn(node.text, theme, source, position, args)
        except Exception:
            logger.exception(f"Error evaluating function {node.name}")
            return None
        return format_value(result)

    def _resolve(self, node: Node, theme: Theme, source: str, position: int) -> object:
        if isinstance(node, FunctionCall):
            fn = self.functions.get(node.name)
            if fn is None:
                # CSS functions such as rgba() pass through untouched
                return node.text
            args = [self._resolve(arg, theme, source, position) for arg in node.args]
            return fn(node.text, theme, source, position, args)

        if isinstance(node, VariableRef):
            found, value = self.variables.lookup(node.name)
            if found:
                return value
            if node.name == RESERVED_VALUE_NAME:
                return self.value_reader(source, position)
            return node.text

        if isinstance(node, PropertyPath):
            found, value = resolve_path(theme, node.segments)
            return value if found and value is not None else node.text

        return node.text
