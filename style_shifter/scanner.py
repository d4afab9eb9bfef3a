"""Position-based scanning of style-sheet text.

This is not a CSS parser: markers, property names and enclosing selectors
are located by substring search around each marker. The ``RuleScanner``
protocol is the seam where a tokenizer-based implementation can be
swapped in.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

MARKER_OPEN = "/*!["
MARKER_CLOSE = "]*/"
IMPORTANT_FLAG = "!important"

# How far past the property colon to look for !important
IMPORTANT_LOOKAHEAD = 100

_WHITESPACE = re.compile(r"\s+")
_SPACE_RUNS = re.compile(r"  +")
_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_DECLARATION_VALUE = re.compile(r":(.+?)(;|\})")
_ORIGINAL_VALUE = re.compile(r":(.*?)(?:;|/\*|\}|$)", re.DOTALL)
_SELECTOR_TRIM = " \t\n\r"


@dataclass(frozen=True)
class Marker:
    """A ``/*![expression]*/`` comment found in source text.

    Attributes:
        expression: Text between the marker delimiters, trimmed.
        start: Offset of the opening ``/*![``.
        end: Offset just past the closing ``]*/``.
    """

    expression: str
    start: int
    end: int

    @property
    def key(self) -> str:
        """Last dotted segment of the expression, used to trace overrides."""
        return self.expression.split(".")[-1]


@dataclass(frozen=True)
class RuleContext:
    """Where a marker sits in the style sheet.

    Attributes:
        prop: Property name the marker precedes.
        rule_name: Canonical raw selector, or at-rule prelude plus selector.
        important: Whether the declaration carries ``!important``.
    """

    prop: str = ""
    rule_name: str = ""
    important: bool = False

    @property
    def is_valid(self) -> bool:
        """True when both a property and a rule name were found."""
        return bool(self.prop and self.rule_name)


class RuleScanner(Protocol):
    """Locates markers and their surrounding rule in style-sheet text."""

    def find_markers(self, source: str) -> Iterator[Marker]:
        """Yield markers in source order."""
        ...

    def rule_context(self, source: str, position: int) -> RuleContext:
        """Describe the declaration and rule around the marker at ``position``."""
        ...

    def rule_name_at(self, source: str, position: int) -> str:
        """Return the raw rule name of the block enclosing ``position``."""
        ...

    def extract_value(self, source: str, position: int) -> str | None:
        """Return the original declaration value following the marker at ``position``."""
        ...


def remove_whitespace(text: str) -> str:
    """Remove every whitespace character."""
    return _WHITESPACE.sub("", text)


def blank_comments(text: str) -> str:
    """Replace every comment with spaces, keeping offsets unchanged."""
    return _COMMENT.sub(lambda match: " " * len(match.group()), text)


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on a separator that is not nested in brackets or quotes.

    Args:
        text: Text to split, e.g. a selector list.
        separator: Single character to split on.

    Returns:
        The untrimmed pieces.
    """
    pieces: list[str] = []
    start = 0
    depth = 0
    quote: str | None = None
    for index, char in enumerate(text):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            pieces.append(text[start:index])
            start = index + 1
    pieces.append(text[start:])
    return pieces


def canonical_rule_name(raw: str) -> str:
    """Normalize a captured selector span.

    Comments are dropped, runs of spaces collapse to one, and each
    comma-separated piece is trimmed.

    Args:
        raw: Text captured in front of a rule's opening brace.

    Returns:
        The canonical raw rule name.
    """
    text = _SPACE_RUNS.sub(" ", _COMMENT.sub("", raw))
    return ",".join(piece.strip(_SELECTOR_TRIM) for piece in split_top_level(text))


def extract_rule_name(source: str, index: int, at_rule: bool = False) -> str:
    """Capture the selector (or at-rule prelude and selector) of a block.

    Args:
        source: Style-sheet text.
        index: Offset at or after the block's opening brace.
        at_rule: Whether the block is nested inside an at-rule.

    Returns:
        The canonical raw rule name, or an empty string if no block opens before ``index``.
    """
    source = blank_comments(source)
    end = source.rfind("{", 0, index + 1)
    if end == -1:
        return ""
    if at_rule:
        start = source.rfind("@", 0, end + 1)
    else:
        # No earlier "}" or ";" (first rule) gives -1, so the span starts at offset 0
        start = max(source.rfind("}", 0, end + 1), source.rfind(";", 0, end + 1)) + 1
    return canonical_rule_name(source[start:end])


def _enclosing_at_rule(source: str, open_brace: int) -> bool:
    """Walk back from a block's brace to decide whether an at-rule wraps it."""
    for index in range(open_brace - 1, -1, -1):
        char = source[index]
        if char == "}":
            return False
        if char == "@":
            # "@import ...;" ends before the block, "@media ... {" encloses it
            return "{" in source[index:open_brace]
    return False


class SubstringRuleScanner:
    """Scans style sheets with substring search around each marker."""

    def find_markers(self, source: str) -> Iterator[Marker]:
        """Yield markers in source order.

        Args:
            source: Style-sheet text.

        Yields:
            Each complete marker; scanning stops at an unterminated one.
        """
        start = source.find(MARKER_OPEN)
        while start != -1:
            close = source.find(MARKER_CLOSE, start + len(MARKER_OPEN))
            if close == -1:
                return
            end = close + len(MARKER_CLOSE)
            yield Marker(
                expression=source[start + len(MARKER_OPEN) : close].strip(),
                start=start,
                end=end,
            )
            start = source.find(MARKER_OPEN, end)

    def rule_context(self, source: str, position: int) -> RuleContext:
        """Find the property, importance and raw rule name for a marker.

        Args:
            source: Style-sheet text.
            position: Offset of the marker's ``/*![``.

        Returns:
            The context; an empty context when the marker is not followed
            by a declaration.
        """
        close = source.find(MARKER_CLOSE, position)
        if close == -1:
            return RuleContext()
        prop_start = close + len(MARKER_CLOSE)
        prop_end = source.find(":", prop_start)
        if prop_end == -1:
            return RuleContext()

        prop = remove_whitespace(source[prop_start:prop_end])
        if not prop or any(char in prop for char in "{};"):
            return RuleContext()

        match = _DECLARATION_VALUE.search(source[prop_end : prop_end + IMPORTANT_LOOKAHEAD])
        important = bool(match) and IMPORTANT_FLAG in match.group(1)

        return RuleContext(prop=prop, rule_name=self.rule_name_at(source, prop_start), important=important)

    def rule_name_at(self, source: str, position: int) -> str:
        """Get the raw rule name of the block enclosing an offset.

        Args:
            source: Style-sheet text.
            position: Offset inside the block.

        Returns:
            The canonical raw rule name, or an empty string outside any block.
        """
        source = blank_comments(source)
        open_brace = source.rfind("{", 0, position)
        if open_brace == -1:
            return ""
        return extract_rule_name(source, open_brace, _enclosing_at_rule(source, open_brace))

    def extract_value(self, source: str, position: int) -> str | None:
        """Read the value of the declaration that follows a marker.

        Args:
            source: Style-sheet text.
            position: Offset of the marker's ``/*![``.

        Returns:
            The trimmed value without any ``!important`` flag, or None.
        """
        close = source.find(MARKER_CLOSE, position)
        start = position if close == -1 else close + len(MARKER_CLOSE)
        block_end = source.find("}", start)
        declaration = source[start:] if block_end == -1 else source[start:block_end]
        match = _ORIGINAL_VALUE.search(declaration)
        if match is None:
            return None
        value = match.group(1).strip()
        if value.endswith(IMPORTANT_FLAG):
            value = value[: -len(IMPORTANT_FLAG)].rstrip()
        return value
