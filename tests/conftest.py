"""Shared test fixtures for style-shifter."""

import pytest

from style_shifter.processor import CSSProcessor
from style_shifter.publisher import MemoryPublisher
from style_shifter.sources import InlineStyleSheets
from style_shifter.theme import Theme
from style_shifter.variables import VariableStore


class FakeNode:
    """Minimal rendering-tree node with class tokens."""

    def __init__(self, *classes: str) -> None:
        self.classes: list[str] = list(classes)
        self.add_calls = 0

    def has_class(self, *class_names: str) -> bool:
        return all(name in self.classes for name in class_names)

    def add_class(self, *class_names: str) -> "FakeNode":
        self.add_calls += 1
        self.classes.extend(class_names)
        return self

    def remove_class(self, *class_names: str) -> "FakeNode":
        self.classes = [name for name in self.classes if name not in class_names]
        return self


@pytest.fixture
def sheets() -> InlineStyleSheets:
    """Empty in-memory style sheets."""
    return InlineStyleSheets()


@pytest.fixture
def publisher() -> MemoryPublisher:
    """Publisher capturing blocks in memory."""
    return MemoryPublisher()


@pytest.fixture
def shared_variables() -> VariableStore:
    """A global variable store isolated from the process-wide one."""
    return VariableStore()


@pytest.fixture
def processor(sheets: InlineStyleSheets, publisher: MemoryPublisher, shared_variables: VariableStore) -> CSSProcessor:
    """Processor for the ``demo`` namespace with isolated collaborators."""
    return CSSProcessor("demo", sources=sheets, publisher=publisher, global_variables=shared_variables)


@pytest.fixture
def dark_theme() -> Theme:
    """Theme named ``dark`` in the ``demo`` namespace."""
    return Theme(
        "demo",
        "dark",
        {
            "bg": "#000",
            "fg": "#fff",
            "size": 16,
            "colors": {"primary": "#ff0000"},
        },
    )


@pytest.fixture
def fake_node() -> FakeNode:
    """A node without classes."""
    return FakeNode()
