"""Cascading defaults for theme data.

A namespace keeps an ordered list of fallback data objects. Applying the
cascade fills in fields a theme's data leaves unset, earlier entries first.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping

from style_shifter.logger import get_logger

logger = get_logger(__name__)

NAME_FIELD = "name"

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


class CascadeRegistry:
    """Per-namespace ordered fallback data."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._cascades: dict[str, list[Mapping[str, object]]] = {}

    def register_cascade(self, namespace: str, data: Mapping[str, object], index: int | None = None) -> None:
        """Add a fallback data object for a namespace.

        Args:
            namespace: Namespace the fallback belongs to.
            data: Fallback field values.
            index: Position to insert at; appended when None.
        """
        cascade = self._cascades.setdefault(namespace, [])
        if index is None:
            cascade.append(data)
        else:
            cascade.insert(index, data)
        logger.debug(f"Registered cascade #{len(cascade)} for namespace {namespace!r}")

    def apply_cascade(self, namespace: str, theme_data: MutableMapping[str, object]) -> MutableMapping[str, object]:
        """Fill unset fields of theme data from the namespace's fallbacks.

        The ``name`` field is only applied when absent and is prefixed with
        ``<namespace>-`` unless it already is.

        Args:
            namespace: Namespace whose fallbacks apply.
            theme_data: Data to fill in place.

        Returns:
            The same ``theme_data`` object.
        """
        for fallback in self._cascades.get(namespace, []):
            for field, value in fallback.items():
                if value is None or field in theme_data:
                    continue
                if field == NAME_FIELD and isinstance(value, str) and not value.startswith(f"{namespace}-"):
                    value = f"{namespace}-{value}"
                theme_data[field] = value
        return theme_data

    def get_cascades(self, namespace: str) -> list[Mapping[str, object]] | None:
        """Get the fallbacks registered for a namespace.

        Args:
            namespace: Namespace to look up.

        Returns:
            A copy of the ordered fallbacks, or None if none were registered.
        """
        cascade = self._cascades.get(namespace)
        return None if cascade is None else list(cascade)

    def clear_cascades(self, namespace: str | None = None) -> None:
        """Remove one namespace's fallbacks, or every namespace's.

        Args:
            namespace: Namespace to clear; all namespaces when None.
        """
        if namespace:
            self._cascades.pop(namespace, None)
        else:
            self._cascades.clear()

    @staticmethod
    def sanitize_name(namespace: str, name: str) -> str:
        """Build a class-safe theme name.

        Args:
            namespace: Namespace prefix.
            name: Theme name.

        Returns:
            ``<namespace>-<name>`` with characters outside ``[A-Za-z0-9-_]`` replaced by ``-``.
        """
        return _INVALID_NAME_CHARS.sub("-", f"{namespace}-{name}")


# Process-wide registry for embedding callers; the CLI builds its own per run
CASCADES = CascadeRegistry()
