"""Built-in marker functions and the registry that resolves function names.

Every function follows one calling convention::

    fn(expression, theme, source, position, args) -> str | None

``expression`` is the literal call text, ``theme`` the theme being scanned,
``source`` the full style-sheet text, ``position`` the offset of the marker
and ``args`` the already-resolved argument list. Returning None means
"no result": no override is recorded for the marker.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING

from style_shifter.colors import clamp, hex_with_alpha, parse_color, rgba_css, round_half_up
from style_shifter.formatters import format_number, format_value, parse_leading_float
from style_shifter.logger import get_logger

if TYPE_CHECKING:
    from style_shifter.theme import Theme

logger = get_logger(__name__)

ThemeFunction = Callable[[str, "Theme", str, int, list[object]], object | None]

DEFAULT_REM_BASE = 16.0
DEFAULT_TINT_AMOUNT = "0.5"

_PRINTF_TOKEN = re.compile(r"%([0-9]+)")
_SIX_DIGIT_HEX = re.compile(r"^[0-9A-Fa-f]{6}$")
_UNIT = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?([^\s]*)")


def _arg(args: list[object], index: int) -> object | None:
    return args[index] if index < len(args) else None


def url(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Wrap a path in ``url()`` to form a valid CSS value."""
    path = _arg(args, 0)
    if path is None:
        return None
    return f"url({format_value(path)})"


def to_px(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Convert a unitless value to pixels, keeping values already in px."""
    raw = _arg(args, 0)
    if raw is None:
        return None
    value = format_value(raw) or ""
    if len(value) >= 3 and value.endswith("px"):
        return value
    number = parse_leading_float(value)
    if number is None:
        return None
    return f"{format_number(number)}px"


def _unit_of(value: str) -> str:
    """Get the unit suffix of a length such as ``"1.5rem"``."""
    match = _UNIT.match(value)
    return match.group(1) if match else ""


def to_rem(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Convert px to rem, or rebase a rem value onto a new base font size.

    Args are ``(value, new_base=16, old_base=16)``. ``old_base`` only applies
    to values already expressed in rem.
    """
    raw = _arg(args, 0)
    if raw is None:
        return None
    text = format_value(raw) or ""
    size = parse_leading_float(text)
    if size is None:
        return None
    base = parse_leading_float(args[1]) if len(args) >= 2 else DEFAULT_REM_BASE
    initial_base = parse_leading_float(args[2]) if len(args) >= 3 else DEFAULT_REM_BASE
    if base is None or base <= 0:
        return None
    if _unit_of(text) == "rem":
        size *= initial_base if initial_base is not None else DEFAULT_REM_BASE
    return f"{format_number(size * ((base / DEFAULT_REM_BASE) / DEFAULT_REM_BASE))}rem"


def opacify(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Apply an opacity (0-1, clamped) to a color.

    Hex input produces ``#rrggbbaa``; any other color notation produces
    ``rgba()``.
    """
    raw = _arg(args, 0)
    if raw is None:
        return None
    color = parse_color(raw)
    amount = parse_leading_float(_arg(args, 1))
    if color is None or amount is None:
        return None
    amount = clamp(amount)
    if str(raw).strip().startswith("#"):
        return hex_with_alpha(color, amount)
    return rgba_css(color.r, color.g, color.b, amount)


def _parse_amount(raw: object) -> float | None:
    text = str(raw).strip()
    if text.endswith("%"):
        percent = parse_leading_float(text[:-1])
        return None if percent is None else percent / 100
    return parse_leading_float(text)


def tint(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Move a base color towards a tint color by an amount (0-1 or percent).

    The tint color's alpha scales the amount; the base color's alpha is kept.
    """
    if _arg(args, 0) is None or _arg(args, 1) is None:
        return None
    base = parse_color(args[0])
    tint_color = parse_color(args[1])
    if base is None or tint_color is None:
        return None
    amount_arg = _arg(args, 2)
    if amount_arg is None or amount_arg == "":
        amount_arg = DEFAULT_TINT_AMOUNT
    amount = _parse_amount(amount_arg)
    if amount is None:
        return None
    amount = clamp(amount) * tint_color.a

    def channel(start: int, end: int) -> int:
        return round_half_up(clamp(start + (end - start) * amount, 0, 255))

    return rgba_css(
        channel(base.r, tint_color.r),
        channel(base.g, tint_color.g),
        channel(base.b, tint_color.b),
        base.a,
    )


def invert(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Invert each RGB channel of a color, keeping its alpha."""
    if _arg(args, 0) is None:
        return None
    color = parse_color(args[0])
    if color is None:
        return None
    return rgba_css(255 - color.r, 255 - color.g, 255 - color.b, color.a)


def printf(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Replace ``%1``, ``%2``... in a template with the following arguments.

    Tokens without a matching argument are left as written.
    """
    template = _arg(args, 0)
    if template is None:
        return None

    def replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < 1 or index >= len(args) or args[index] is None:
            return match.group(0)
        return format_value(args[index]) or ""

    return _PRINTF_TOKEN.sub(replace, str(template))


def map_svg_colors(expression: str, theme: Theme, source: str, position: int, args: list[object]) -> str | None:
    """Recolor an inline SVG and return it as a base64 data URI.

    Args are ``(svg, "#orig1|#orig2", replacement1, replacement2, ...)``.
    Originals match case-insensitively, with or without ``#``.
    """
    if len(args) < 3 or not args[0] or not args[1]:
        logger.error("mapSvgColors requires svg content, original colors and at least one replacement color")
        return None

    svg = str(args[0])
    originals = [color.strip() for color in str(args[1]).split("|")]
    replacements = args[2:]
    if len(originals) != len(replacements):
        logger.error(
            f"Number of original colors ({len(originals)}) must match replacement colors ({len(replacements)})"
        )
        return None

    for original, replacement in zip(originals, replacements, strict=True):
        new_color = format_value(replacement) or ""
        if not new_color.startswith("#") and _SIX_DIGIT_HEX.match(new_color):
            new_color = f"#{new_color}"
        pattern = re.compile(f"#?{re.escape(original.lstrip('#'))}", re.IGNORECASE)
        svg = pattern.sub(lambda _match, color=new_color: color, svg)

    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


BUILTIN_FUNCTIONS: dict[str, ThemeFunction] = {
    "url": url,
    "toPx": to_px,
    "toRem": to_rem,
    "opacify": opacify,
    "tint": tint,
    "invert": invert,
    "printf": printf,
    "mapSvgColors": map_svg_colors,
}


class FunctionRegistry:
    """Maps marker function names to callables.

    Seeded with the built-ins; registering an existing name replaces it.
    """

    def __init__(self, functions: Mapping[str, ThemeFunction] | None = None) -> None:
        """Initialize the registry.

        Args:
            functions: Initial functions; defaults to the built-ins.
        """
        self._functions: dict[str, ThemeFunction] = dict(BUILTIN_FUNCTIONS if functions is None else functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def register(self, name: str, fn: ThemeFunction) -> None:
        """Register or replace a function.

        Args:
            name: Name used inside marker expressions.
            fn: Callable following the marker function convention.
        """
        if name in self._functions:
            logger.debug(f"Replacing marker function {name!r}")
        self._functions[name] = fn

    def get(self, name: str) -> ThemeFunction | None:
        """Look up a function by name.

        Args:
            name: Function name.

        Returns:
            The callable, or None if no function has that name.
        """
        return self._functions.get(name)
