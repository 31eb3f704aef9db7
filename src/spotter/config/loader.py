"""Config loader for YAML configuration files."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from spotter.config.settings import SpotterConfig
from spotter.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Environment variable -> (settings section, key)
ENV_OVERRIDES = {
    "ADMIN_PASS": ("admin", "password"),
    "SPOTTER_LOG_LEVEL": ("logging", "level"),
}


class ConfigLoader:
    """Load SpotterConfig from YAML files and the environment."""

    @staticmethod
    def load(path: Path | str | None = None, *, use_env: bool = True) -> SpotterConfig:
        """Load configuration from a YAML file or a directory of YAML files.

        Args:
            path: Path to config directory or spotter.yaml file. None means
                defaults plus environment.
            use_env: Apply ADMIN_PASS and SPOTTER_LOG_LEVEL (after reading a
                local .env file).

        Returns:
            Parsed SpotterConfig instance

        Raises:
            ConfigError: If files are missing, unreadable or invalid
        """
        data: dict[str, Any] = {"settings": {}}
        if path is not None:
            data = ConfigLoader._read(Path(path))

        if use_env:
            load_dotenv()
            ConfigLoader._apply_env(data)

        try:
            return SpotterConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}", errors=e.error_count()) from e

    @staticmethod
    def _read(config_path: Path) -> dict[str, Any]:
        if config_path.is_dir():
            yaml_file = config_path / "spotter.yaml"
            if yaml_file.exists():
                return _load_yaml(yaml_file)

            # Merge all .yaml files in directory
            files = sorted(config_path.glob("*.yaml"))
            if not files:
                raise ConfigError(f"No config files found in {config_path}")
            data: dict[str, Any] = {"settings": {}}
            for fpath in files:
                chunk = _load_yaml(fpath)
                for section, values in (chunk.get("settings") or {}).items():
                    if isinstance(values, dict):
                        data["settings"].setdefault(section, {}).update(values)
                    else:
                        data["settings"][section] = values
                for k, v in chunk.items():
                    if k != "settings":
                        data[k] = v
            return data

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        return _load_yaml(config_path)

    @staticmethod
    def _apply_env(data: dict[str, Any]) -> None:
        settings = data.setdefault("settings", {})
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(variable)
            if value:
                settings.setdefault(section, {})[key] = value
                logger.debug(f"Config {section}.{key} set from ${variable}")


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", path=str(path)) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping", path=str(path))
    data.setdefault("settings", {})
    if not isinstance(data["settings"], dict):
        raise ConfigError(f"'settings' in {path} must be a mapping", path=str(path))
    return data
