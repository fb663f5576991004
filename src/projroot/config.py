"""
projroot configuration loader.

Loads options from a YAML file. Every key is optional; missing keys keep
their defaults.

Example config:
    detection_methods:
      - pattern
    patterns:
      - .git
      - "=src"
      - "!>node_modules"
    silent_chdir: false
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from projroot.exceptions import ConfigError, InvalidDetectionMethodError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PROJROOT_CONFIG"

DETECTION_METHODS = {"lsp", "pattern"}

DEFAULT_PATTERNS = [".git", "_darcs", ".hg", ".bzr", ".svn", "Makefile", "package.json"]


def default_datapath() -> Path:
    return Path.home() / ".local" / "share" / "projroot"


@dataclass
class Options:
    """Effective projroot options."""

    manual_mode: bool = False
    detection_methods: List[str] = field(default_factory=lambda: ["lsp", "pattern"])
    patterns: List[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    ignore_lsp: List[str] = field(default_factory=list)
    silent_chdir: bool = True
    datapath: Path = field(default_factory=default_datapath)

    def __post_init__(self) -> None:
        for method in self.detection_methods:
            validate_detection_method(method)
        self.datapath = Path(self.datapath).expanduser()


def validate_detection_method(method: str) -> None:
    """Raise InvalidDetectionMethodError if method is unknown."""
    if method not in DETECTION_METHODS:
        raise InvalidDetectionMethodError(method, DETECTION_METHODS)


def default_config_path() -> Path:
    """Return $PROJROOT_CONFIG, or ~/.config/projroot/config.yaml."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "projroot" / "config.yaml"


_LIST_KEYS = {"detection_methods", "patterns", "ignore_lsp"}
_BOOL_KEYS = {"manual_mode", "silent_chdir"}


def _check_types(path: Path, data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(Options)}
    options: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown option %r in %s", key, path)
            continue
        if key in _LIST_KEYS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(path, f"'{key}' must be a list of strings")
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ConfigError(path, f"'{key}' must be true or false")
        elif key == "datapath":
            if not isinstance(value, str):
                raise ConfigError(path, "'datapath' must be a path string")
        options[key] = value
    return options


def load_options(config_path: Optional[Path] = None) -> Options:
    """
    Load options from a YAML config file.

    Args:
        config_path: Config file path (default: default_config_path())

    Returns:
        Options with values from the file applied over the defaults.

    Raises:
        ConfigError: If the file is not valid YAML or has wrongly typed values.
        InvalidDetectionMethodError: If an unknown detection method is listed.
    """
    path = Path(config_path) if config_path is not None else default_config_path()

    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return Options()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(path, str(e)) from e
    except OSError as e:
        raise ConfigError(path, e.strerror or str(e)) from e

    if data is None:
        return Options()
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")

    return Options(**_check_types(path, data))
