"""Command-line entry point for style-shifter."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from style_shifter.cascade import CascadeRegistry
from style_shifter.logger import add_stderr_sink, get_logger, remove_sink
from style_shifter.processor import CSSProcessor
from style_shifter.publisher import FilePublisher, MemoryPublisher
from style_shifter.settings import LOG_LEVELS, load_settings
from style_shifter.sources import HttpStyleSheets
from style_shifter.theme import Theme

logger = get_logger(__name__)


class ThemeFileError(Exception):
    """Raised when a theme file cannot be loaded."""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Parser for the ``style-shifter`` command.
    """
    parser = argparse.ArgumentParser(
        prog="style-shifter",
        description="Generate theme-scoped CSS overrides from marker comments.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build the override style sheet for a theme")
    build.add_argument("theme", type=Path, help="Theme JSON file")
    build.add_argument("stylesheets", nargs="*", help="Style sheet URLs or paths (defaults to configured ones)")
    build.add_argument("--namespace", help="Namespace used when the theme file does not set one")
    build.add_argument("--output-dir", type=Path, help="Write the block to this directory instead of stdout")
    build.add_argument("--log-level", choices=LOG_LEVELS, help="Log level mirrored to stderr")
    return parser


def load_theme_file(path: Path, namespace: str, cascades: CascadeRegistry) -> Theme:
    """Load a theme from JSON, filling gaps from its cascade entries.

    The file holds ``name``, ``data`` and optionally ``namespace``, ``fonts``
    and ``cascade`` (a list of fallback data objects).

    Args:
        path: Theme file.
        namespace: Namespace used when the file does not set one.
        cascades: Registry the file's cascade entries are added to.

    Returns:
        The loaded theme.

    Raises:
        ThemeFileError: If the file is unreadable or malformed.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot read theme file {path}: {exc}"
        raise ThemeFileError(msg) from exc
    if not isinstance(raw, dict):
        msg = f"Theme file {path} must contain a JSON object"
        raise ThemeFileError(msg)

    theme_namespace = raw.get("namespace") if isinstance(raw.get("namespace"), str) else namespace
    data = raw.get("data", {})
    if not isinstance(data, dict):
        msg = f"Theme file {path}: 'data' must be an object"
        raise ThemeFileError(msg)

    for entry in raw.get("cascade", []) or []:
        if isinstance(entry, dict):
            cascades.register_cascade(theme_namespace, entry)
    cascades.apply_cascade(theme_namespace, data)

    name = raw.get("name") or data.get("name")
    if not isinstance(name, str) or not name:
        msg = f"Theme file {path} does not define a theme name"
        raise ThemeFileError(msg)

    fonts = raw.get("fonts")
    return Theme(theme_namespace, name, data, fonts=fonts if isinstance(fonts, dict) else None)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    settings = load_settings()

    sink_id = add_stderr_sink(args.log_level or settings.log_level)
    try:
        try:
            theme = load_theme_file(args.theme, args.namespace or settings.namespace, CascadeRegistry())
        except ThemeFileError as exc:
            logger.error(str(exc))
            return 1

        output_dir = args.output_dir or (Path(settings.output_dir) if settings.output_dir else None)
        publisher = FilePublisher(output_dir) if output_dir is not None else MemoryPublisher()
        processor = CSSProcessor(
            theme.namespace,
            sources=HttpStyleSheets(args.stylesheets or settings.stylesheets, timeout=settings.fetch_timeout),
            publisher=publisher,
        )
        processor.add_theme(theme)

        if isinstance(publisher, MemoryPublisher):
            sys.stdout.write(publisher.get(processor.block_id) or "")
        return 0
    finally:
        remove_sink(sink_id)
