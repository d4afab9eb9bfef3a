"""Rewriting raw selectors into theme-scoped selectors."""

from __future__ import annotations

from style_shifter.logger import get_logger
from style_shifter.scanner import split_top_level

logger = get_logger(__name__)

SCOPE_BEFORE = "before"
SCOPE_AFTER = "after"


def format_rule_selector(rule_name: str, theme_name: str) -> str:
    """Prefix every selector of a rule with the theme class.

    An at-rule prelude (``@media screen {``) is kept in front of the scoped
    selectors. At-rules without a nested selector, such as ``@font-face``,
    cannot be scoped and are returned unchanged.

    Args:
        rule_name: Canonical raw rule name.
        theme_name: Theme class name.

    Returns:
        Scoped rule name, e.g. ``.dark .button, .dark .link``.
    """
    prelude = ""
    selectors = rule_name
    if rule_name.startswith("@"):
        head, brace, selectors = rule_name.partition("{")
        if not brace:
            return rule_name
        prelude = f"{head.strip()} {{ "

    selectors = " ".join(selectors.split())
    scoped = [f".{theme_name} {selector.strip()}" for selector in split_top_level(selectors)]
    return prelude + ", ".join(scoped)


def custom_scope(rule_name: str, selector: str, theme_name: str, mode: str | None = None) -> str | None:
    """Build a non-default scope by rewriting one selector inside a rule name.

    Args:
        rule_name: Canonical raw rule name.
        selector: Sub-selector to rewrite (first occurrence).
        theme_name: Theme class name.
        mode: None to append the class to ``selector``, ``"before"`` to put
            the theme class in front of it, ``"after"`` to nest the theme
            class under it.

    Returns:
        The rewritten rule name, or None for an unknown mode.
    """
    if mode is None:
        replacement = f"{selector}.{theme_name}"
    elif mode == SCOPE_BEFORE:
        replacement = f".{theme_name} {selector}"
    elif mode == SCOPE_AFTER:
        replacement = f"{selector} .{theme_name}"
    else:
        logger.warning(f"Unknown rule scope mode {mode!r} for {selector!r}")
        return None
    return rule_name.replace(selector, replacement, 1)


class SelectorScoper:
    """Scopes rule names per theme, honoring registered custom scopes."""

    def __init__(self) -> None:
        """Initialize with no custom scopes."""
        self._custom: dict[str, dict[str, str]] = {}

    def scope(self, rule_name: str, theme_name: str) -> str:
        """Get the scoped form of a raw rule name.

        Args:
            rule_name: Canonical raw rule name.
            theme_name: Theme class name.

        Returns:
            The custom scope registered for this theme and rule, else the
            default theme-prefixed selector.
        """
        custom = self._custom.get(theme_name, {}).get(rule_name)
        if custom is not None:
            return custom
        return format_rule_selector(rule_name, theme_name)

    def register(self, theme_name: str, rule_name: str, scoped: str) -> None:
        """Store a custom scope for one raw rule name under a theme.

        Args:
            theme_name: Theme class name.
            rule_name: Canonical raw rule name.
            scoped: Replacement scoped rule name.
        """
        logger.debug(f"Custom scope for {theme_name}: {rule_name!r} -> {scoped!r}")
        self._custom.setdefault(theme_name, {})[rule_name] = scoped

    def custom_scopes(self, theme_name: str) -> dict[str, str]:
        """Get a copy of the custom scopes registered for a theme."""
        return dict(self._custom.get(theme_name, {}))
