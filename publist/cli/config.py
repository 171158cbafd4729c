"""Configuration file handling for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

from publist.exceptions import ConfigError


class Config:
    """Configuration files of the CLI."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load render options from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(str(path), f"invalid YAML: {e}")
        except OSError as e:
            raise ConfigError(str(path), f"cannot read file: {e}")

        if not isinstance(data, dict):
            raise ConfigError(str(path), "expected a mapping of options")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "publist" / "config.yaml")

        # Project config
        paths.append(Path(".publist.yaml"))
        paths.append(Path("publist.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load options from the default files, ``path`` and the environment.

    Later sources win: user config, project config, the explicit file,
    then environment variables.
    """
    config: dict[str, Any] = {}

    for default_path in Config.get_config_paths():
        if default_path.exists():
            config = Config.merge_configs(config, Config.from_file(default_path))

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    # Override with environment variables
    env_overrides = {}
    if style := os.environ.get("PUBLIST_STYLE"):
        env_overrides["style"] = style
    if pdf_dir := os.environ.get("PUBLIST_PDF_DIR"):
        env_overrides["pdf_directory"] = pdf_dir
    if preview_dir := os.environ.get("PUBLIST_PREVIEW_DIR"):
        env_overrides["preview_directory"] = preview_dir

    return Config.merge_configs(config, env_overrides)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
