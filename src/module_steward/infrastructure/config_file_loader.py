"""Load steward settings from steward.yaml or [tool.steward] in pyproject.toml. Infrastructure I/O only."""

import logging
import tomllib
from pathlib import Path
from typing import Optional

import yaml

STEWARD_CONFIG_FILE: str = "steward.yaml"
PYPROJECT_FILE: str = "pyproject.toml"


class ConfigFileLoader:
    """
    Walks up from a start directory; the first steward.yaml or pyproject.toml
    with a [tool.steward] table wins. No top-level functions.
    """

    @staticmethod
    def _read_yaml(path: Path) -> Optional[dict[str, object]]:
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            logging.warning("Configuration Warning: cannot read %s: %s", path, exc)
            return None
        if data is None:
            return {}
        if not isinstance(data, dict):
            logging.warning("Configuration Warning: %s is not a mapping; ignored.", path)
            return None
        return data

    @staticmethod
    def _read_pyproject(path: Path) -> Optional[dict[str, object]]:
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logging.warning("Configuration Warning: cannot read %s: %s", path, exc)
            return None
        tool_section = data.get("tool", {}) or {}
        section = tool_section.get("steward")
        return section if isinstance(section, dict) else None

    @staticmethod
    def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
        current = (start or Path.cwd()).resolve()
        if current.is_file():
            current = current.parent
        for directory in (current, *current.parents):
            candidate = directory / STEWARD_CONFIG_FILE
            if candidate.is_file():
                return candidate
            pyproject = directory / PYPROJECT_FILE
            if pyproject.is_file() and ConfigFileLoader._read_pyproject(pyproject) is not None:
                return pyproject
        return None

    @staticmethod
    def load_config_from_fs(start: Optional[Path] = None) -> dict[str, object]:
        """Return the settings dict, or {} when no configuration is found."""
        path = ConfigFileLoader.find_config_file(start)
        if path is None:
            return {}
        if path.name == STEWARD_CONFIG_FILE:
            return ConfigFileLoader._read_yaml(path) or {}
        return ConfigFileLoader._read_pyproject(path) or {}
