"""Variable stores available to marker expressions.

Each processor owns a private ``VariableStore``; every processor also reads
and writes one shared store. The shared store defaults to the process-wide
``GLOBAL_VARIABLES`` but can be injected, so tests can isolate instances.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

# The original declaration value; never assignable from a marker
RESERVED_VALUE_NAME = "value"


class VariableStore:
    """A named key/value store."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._values: dict[str, object] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str, default: object = None) -> object:
        """Get a variable value.

        Args:
            name: Variable name.
            default: Returned when the variable is unset.

        Returns:
            The stored value or the default.
        """
        return self._values.get(name, default)

    def set(self, name: str, value: object) -> bool:
        """Set a variable, refusing the reserved ``value`` name.

        Args:
            name: Variable name.
            value: Value to store.

        Returns:
            True if the variable was written.
        """
        if name == RESERVED_VALUE_NAME:
            return False
        self._values[name] = value
        return True

    def clear(self) -> None:
        """Remove every variable."""
        self._values.clear()


GLOBAL_VARIABLES = VariableStore()


@dataclass
class VariableScopes:
    """The local and shared stores seen by one processor.

    Attributes:
        local: Store private to the owning processor.
        shared: Store shared with every other processor using the same object.
    """

    local: VariableStore = field(default_factory=VariableStore)
    shared: VariableStore = field(default_factory=lambda: GLOBAL_VARIABLES)

    def lookup(self, name: str) -> tuple[bool, object]:
        """Resolve a variable, local scope first.

        Args:
            name: Variable name.

        Returns:
            Tuple of (found, value).
        """
        if name in self.local:
            return True, self.local.get(name)
        if name in self.shared:
            return True, self.shared.get(name)
        return False, None
