"""Persistent settings for style-shifter."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from style_shifter.logger import get_logger
from style_shifter.sources import DEFAULT_FETCH_TIMEOUT

logger = get_logger(__name__)

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_NAMESPACE = "theme"
DEFAULT_LOG_LEVEL = "WARNING"

# Style-sheet fetch timeout (in seconds)
MIN_FETCH_TIMEOUT = 0.5
MAX_FETCH_TIMEOUT = 120.0


@dataclass(frozen=True)
class Settings:
    """User-configurable settings stored on disk."""

    namespace: str = DEFAULT_NAMESPACE
    log_level: str = DEFAULT_LOG_LEVEL
    # Style sheet URLs or paths, in discovery order
    stylesheets: tuple[str, ...] = ()
    # Directory for published blocks; None prints to stdout
    output_dir: str | None = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Settings:
        """Create settings from a mapping, applying defaults for invalid values.

        Args:
            data: Mapping containing raw settings values.

        Returns:
            A Settings instance with validated values.
        """
        namespace = _coerce_str(data.get("namespace"))
        if not namespace:
            namespace = DEFAULT_NAMESPACE

        log_level_value = _coerce_str(data.get("log_level"))
        log_level = log_level_value if log_level_value in LOG_LEVELS else DEFAULT_LOG_LEVEL

        stylesheets: tuple[str, ...] = ()
        raw_stylesheets = data.get("stylesheets")
        if isinstance(raw_stylesheets, list):
            stylesheets = tuple(href for href in raw_stylesheets if isinstance(href, str) and href)

        output_dir = _coerce_str(data.get("output_dir")) or None

        fetch_timeout = _coerce_float(data.get("fetch_timeout"))
        if fetch_timeout is None or fetch_timeout < MIN_FETCH_TIMEOUT or fetch_timeout > MAX_FETCH_TIMEOUT:
            fetch_timeout = DEFAULT_FETCH_TIMEOUT

        return cls(
            namespace=namespace,
            log_level=log_level,
            stylesheets=stylesheets,
            output_dir=output_dir,
            fetch_timeout=fetch_timeout,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize settings to a dictionary.

        Returns:
            Dictionary representation of settings.
        """
        return {
            "namespace": self.namespace,
            "log_level": self.log_level,
            "stylesheets": list(self.stylesheets),
            "output_dir": self.output_dir,
            "fetch_timeout": self.fetch_timeout,
        }


def get_config_dir() -> Path:
    """Get the directory used for persistent configuration.

    Returns:
        Path to the configuration directory.
    """
    override_dir = os.environ.get("STYLE_SHIFTER_CONFIG_DIR")
    if override_dir:
        return Path(override_dir).expanduser()

    base_dir = os.environ.get("XDG_CONFIG_HOME")
    if base_dir:
        return Path(base_dir).expanduser() / "style-shifter"

    return Path.home() / ".config" / "style-shifter"


def get_settings_path() -> Path:
    """Get the full path to the settings file.

    Returns:
        Path to the settings JSON file.
    """
    return get_config_dir() / "settings.json"


def load_settings() -> Settings:
    """Load settings from disk.

    Returns:
        Loaded settings, or defaults if none exist.
    """
    settings_path = get_settings_path()
    if not settings_path.exists():
        return Settings()

    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning(f"Failed to parse settings file {settings_path}: {exc}")
        return Settings()
    except OSError as exc:
        logger.warning(f"Failed to read settings file {settings_path}: {exc}")
        return Settings()

    if not isinstance(raw, dict):
        logger.warning(f"Settings file {settings_path} contains invalid data")
        return Settings()

    return Settings.from_mapping(raw)


def save_settings(settings: Settings) -> None:
    """Persist settings to disk.

    Args:
        settings: Settings to persist.
    """
    settings_path = get_settings_path()
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning(f"Failed to save settings to {settings_path}: {exc}")


def _coerce_str(value: object) -> str | None:
    """Coerce a value into a string if possible.

    Args:
        value: Raw value to coerce.

    Returns:
        String value or None.
    """
    if isinstance(value, str):
        return value
    return None


def _coerce_float(value: object) -> float | None:
    """Coerce a value into a float if possible.

    Args:
        value: Raw value to coerce.

    Returns:
        Float value or None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None
