"""Accumulation of overrides and synthesis of the override style sheet."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass


@dataclass
class Override:
    """One declaration to emit under a scoped rule.

    Attributes:
        rule: Scoped rule name the declaration belongs to.
        prop: CSS property name.
        value: Resolved value.
        key: Last segment of the marker expression that produced the value.
        important: Whether to append ``!important``.
    """

    rule: str
    prop: str
    value: str
    key: str
    important: bool = False

    def as_declaration(self) -> str:
        """Render as ``prop: value[ !important];``."""
        flag = " !important" if self.important else ""
        return f"{self.prop}: {self.value}{flag};"


def font_face(family: str, source_url: str) -> str:
    """Render one ``@font-face`` block."""
    return f"@font-face {{ font-family: {family}; src: url('{source_url}'); }}\n"


class OverrideStore:
    """Ordered overrides per scoped rule name.

    Records are only ever appended. When synthesizing, the first record for
    a (rule, property) pair wins and later ones are skipped.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._rules: dict[str, list[Override]] = {}

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def record(self, override: Override) -> None:
        """Append an override to its rule.

        Args:
            override: Override to store.
        """
        self._rules.setdefault(override.rule, []).append(override)

    def overrides_for(self, rule: str) -> list[Override]:
        """Get every override recorded for a scoped rule, in record order."""
        return list(self._rules.get(rule, []))

    def synthesize(self, fonts: Mapping[str, str] | None = None) -> str:
        """Render the accumulated overrides as style-sheet text.

        Args:
            fonts: Font family to source URL mapping rendered as ``@font-face`` blocks.

        Returns:
            The override style sheet.
        """
        lines: list[str] = []
        for rule, overrides in self._rules.items():
            emitted: set[str] = set()
            declarations: list[str] = []
            for override in overrides:
                if override.prop in emitted:
                    continue
                emitted.add(override.prop)
                declarations.append(override.as_declaration())
            # An at-rule prelude opens one extra block per "{"
            extra = "}" * (rule.count("{") - rule.count("}"))
            lines.append(f"{rule} {{ {' '.join(declarations)} }}{extra}\n")

        for family, source_url in (fonts or {}).items():
            lines.append(font_face(family, source_url))
        return "".join(lines)
