"""Configuration file support for trackview.

This module handles loading and parsing the .trackview.yaml configuration file.

The config file supports a nested structure where each component can have
its own section. Example:

    # Tracking-status view settings
    view:
      default_item_limit: 10
      page_item_limit: 20
      show_ahead_commits: true
      show_date_markers: true
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
import logging
import os
import yaml

log = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = ".trackview.yaml"
CONFIG_ENV_VAR = "TRACKVIEW_CONFIG"


def _get_int(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def _get_bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}")
    return value


@dataclass
class ViewConfig:
    """Configuration for the tracking-status view.

    Attributes:
        default_item_limit: Number of commits loaded for the first page
            (0 loads every commit).
        page_item_limit: Number of commits added by each "load more".
        show_ahead_commits: Show the commits to push under an ahead node.
            When false the ahead node lists the changed files directly.
        show_date_markers: Group commit entries under per-day markers.
    """

    default_item_limit: int = 10
    page_item_limit: int = 20
    show_ahead_commits: bool = True
    show_date_markers: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ViewConfig":
        """Create a ViewConfig from a dictionary.

        Args:
            data: Dictionary with configuration values.

        Returns:
            ViewConfig instance with values from data.

        Raises:
            ValueError: If a value has the wrong type.
        """
        return cls(
            default_item_limit=_get_int(data, "default_item_limit", cls.default_item_limit),
            page_item_limit=_get_int(data, "page_item_limit", cls.page_item_limit),
            show_ahead_commits=_get_bool(data, "show_ahead_commits", cls.show_ahead_commits),
            show_date_markers=_get_bool(data, "show_date_markers", cls.show_date_markers),
        )


@dataclass
class TrackviewConfig:
    """Configuration settings for trackview.

    All settings are optional and have sensible defaults.

    Attributes:
        view: Configuration for the tracking-status view.
        _raw: Raw dictionary data for accessing arbitrary sections.
    """

    view: ViewConfig = field(default_factory=ViewConfig)
    _raw: Dict[str, Any] = field(default_factory=dict)

    def get_section(self, name: str) -> Dict[str, Any]:
        return self._raw.get(name, {})

    @classmethod
    def from_dict(cls, data: dict) -> "TrackviewConfig":
        view_data = data.get("view") or {}
        if not isinstance(view_data, dict):
            raise ValueError("'view' section must be a mapping")

        return cls(
            view=ViewConfig.from_dict(view_data) if view_data else ViewConfig(),
            _raw=data,
        )


def load_config(config_path: Optional[str] = None) -> TrackviewConfig:
    """Load configuration from a YAML file.

    The path is taken from `config_path`, then from the TRACKVIEW_CONFIG
    environment variable, then defaults to .trackview.yaml. An explicitly
    named file that doesn't exist is an error; a missing default file yields
    the default config.

    Args:
        config_path: Path to the config file, or None.

    Returns:
        TrackviewConfig instance with loaded or default values.

    Raises:
        FileNotFoundError: If an explicitly named file doesn't exist.
        yaml.YAMLError: If the config file contains invalid YAML.
        ValueError: If the config file contains invalid values.
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR) or None

    explicit_path = config_path is not None
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit_path:
            raise FileNotFoundError(f"Config file not found: {path}")
        return TrackviewConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    # Handle empty file or file with only comments
    if data is None:
        return TrackviewConfig()

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a YAML mapping (dictionary)")

    log.debug(f"Loaded config from {path}")
    return TrackviewConfig.from_dict(data)
