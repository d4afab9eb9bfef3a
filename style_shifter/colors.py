"""CSS color handling for the built-in color functions.

Parsing is delegated to Textual's color model so hex (3, 4, 6 and 8 digit),
``rgb()``/``rgba()``, ``hsl()`` and named colors are all understood.

Usage:
    from style_shifter.colors import parse_color, rgba_css

    color = parse_color("#ff000080")
    rgba_css(color.r, color.g, color.b, color.a)  # 'rgba(255, 0, 0, 0.5019607843137255)'
"""

from __future__ import annotations

import math

from textual.color import Color, ColorParseError

from style_shifter.formatters import format_number
from style_shifter.logger import get_logger

logger = get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    """Clamp a value into an inclusive range.

    Args:
        value: Value to clamp.
        minimum: Lower bound.
        maximum: Upper bound.

    Returns:
        The clamped value.
    """
    return max(minimum, min(maximum, value))


def parse_color(value: object) -> Color | None:
    """Parse a CSS color string.

    Args:
        value: Candidate color text.

    Returns:
        A Textual Color, or None when the text is not a color.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return Color.parse(text)
    except ColorParseError:
        logger.debug(f"Not a color: {text!r}")
        return None


def alpha_byte(alpha: float) -> int:
    """Convert a 0-1 alpha to a 0-255 channel value."""
    return round_half_up(clamp(alpha) * 255)


def hex_with_alpha(color: Color, alpha: float) -> str:
    """Format a color as lowercase ``#rrggbbaa``.

    Args:
        color: Source color; its own alpha is ignored.
        alpha: Alpha in the 0-1 range.

    Returns:
        Eight digit hex color.
    """
    return f"#{color.r:02x}{color.g:02x}{color.b:02x}{alpha_byte(alpha):02x}"


def rgba_css(r: int, g: int, b: int, alpha: float) -> str:
    """Format channels as an ``rgba()`` declaration value.

    Args:
        r: Red channel, 0-255.
        g: Green channel, 0-255.
        b: Blue channel, 0-255.
        alpha: Alpha in the 0-1 range.

    Returns:
        String like ``rgba(0, 255, 255, 1)``.
    """
    return f"rgba({r}, {g}, {b}, {format_number(alpha)})"
