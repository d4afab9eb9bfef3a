"""Publishing synthesized style blocks to the rendering surface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from style_shifter.logger import get_logger

logger = get_logger(__name__)

BLOCK_ID_PREFIX = "style-shifter-"


def block_id_for(namespace: str) -> str:
    """Get the stable identifier of a namespace's style block."""
    return f"{BLOCK_ID_PREFIX}{namespace}"


class StylePublisher(Protocol):
    """A surface holding named, replaceable blocks of style text."""

    def publish(self, block_id: str, css: str) -> None:
        """Create the block, or replace its text if it exists."""
        ...


class MemoryPublisher:
    """Keeps published blocks in a dictionary."""

    def __init__(self) -> None:
        """Initialize with no blocks."""
        self.blocks: dict[str, str] = {}

    def publish(self, block_id: str, css: str) -> None:
        """Replace the text of a block.

        Args:
            block_id: Block identifier.
            css: Complete block text.
        """
        self.blocks[block_id] = css

    def get(self, block_id: str) -> str | None:
        """Get a block's text, or None if it was never published."""
        return self.blocks.get(block_id)


class FilePublisher:
    """Writes each block to ``<directory>/<block_id>.css``."""

    def __init__(self, directory: Path) -> None:
        """Initialize the publisher.

        Args:
            directory: Output directory, created on first publish.
        """
        self.directory = directory

    def path_for(self, block_id: str) -> Path:
        """Get the file backing a block."""
        return self.directory / f"{block_id}.css"

    def publish(self, block_id: str, css: str) -> None:
        """Write the block, replacing any previous file.

        Args:
            block_id: Block identifier.
            css: Complete block text.
        """
        path = self.path_for(block_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(css, encoding="utf-8")
        except OSError as exc:
            logger.warning(f"Failed to publish {block_id} to {path}: {exc}")
            return
        logger.info(f"Published {block_id} to {path}")
