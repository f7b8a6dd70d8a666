"""Configuration loader for rstedit.

This module provides the ConfigLoader class for loading, parsing, and
validating parser and rewrite configuration from YAML or JSON files, plus the
``[constants]`` table of a documentation project's TOML file.
"""

import json
import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from rstedit.config.defaults import (
    CONFIG_KEY_ALIASES,
    DEFAULT_CONFIG_FILENAMES,
    ENV_VAR_MAP,
)
from rstedit.config.validator import flatten_pydantic_errors
from rstedit.lib.errors import ConfigError, FileNotFoundError
from rstedit.models.config import ParserConfig, RewriteConfig

logger = logging.getLogger(__name__)


def _parse_env_value(field_name: str, value: str) -> Any:
    """Parse environment variable value to appropriate type.

    Args:
        field_name: Name of the field (used to determine type)
        value: String value from environment variable

    Returns:
        Parsed value in correct type (int, list of str, or str)

    Raises:
        ValueError: If value cannot be parsed
    """
    if field_name == "max_nesting_depth":
        return int(value)
    elif field_name == "xref_roles":
        return [role.strip() for role in value.split(",") if role.strip()]
    else:
        return value


def _get_env_value(field_name: str, env_vars: Mapping[str, str]) -> Any | None:
    """Get environment variable value for a field.

    Args:
        field_name: Name of field to get
        env_vars: Environment variables mapping

    Returns:
        Parsed value or None if not found or invalid
    """
    env_var_name = ENV_VAR_MAP.get(field_name)
    if not env_var_name or env_var_name not in env_vars:
        return None

    try:
        return _parse_env_value(field_name, env_vars[env_var_name])
    except ValueError:
        logger.warning(
            f"Ignoring invalid value for {env_var_name}: {env_vars[env_var_name]!r}"
        )
        return None


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map aliased top-level keys to their field names."""
    return {CONFIG_KEY_ALIASES.get(key, key): value for key, value in data.items()}


class ConfigLoader:
    """Loads and validates rstedit configuration files.

    Configuration precedence (highest to lowest):
    1. Explicit settings in the configuration file
    2. Environment variables (parser settings only)
    3. Model defaults

    Example:
        >>> loader = ConfigLoader(env={"RSTEDIT_MAX_NESTING_DEPTH": "8"})
        >>> loader.load_parser_config().max_nesting_depth
        8
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the ConfigLoader.

        Args:
            env: Environment mapping, ``os.environ`` by default
        """
        self._env = os.environ if env is None else env

    def parse_file(self, file_path: str | Path) -> dict[str, Any]:
        """Parse a YAML or JSON file and return its contents as a dictionary.

        Files ending in ``.json`` are read as JSON, everything else as YAML.

        Args:
            file_path: Path to the file to parse

        Returns:
            Dictionary with the parsed content, empty if the file is empty

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If parsing fails or the top level is not a mapping
        """
        path = Path(file_path)

        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix == ".json":
                    content = json.load(f)
                else:
                    content = yaml.safe_load(f)
        except OSError as e:
            raise FileNotFoundError(
                str(file_path),
                f"Configuration file not found at {file_path}. "
                f"Please ensure the file exists at this path.",
            ) from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(
                "file_parse",
                f"Failed to parse configuration file {file_path}: {str(e)}",
            ) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                "file_parse",
                f"Configuration file {file_path} must contain a mapping, "
                f"got {type(content).__name__}",
            )
        return content

    def find_config_file(self, directory: str | Path) -> Path | None:
        """Return the first default configuration file in ``directory``."""
        for name in DEFAULT_CONFIG_FILENAMES:
            candidate = Path(directory) / name
            if candidate.is_file():
                return candidate
        return None

    def load_parser_config(self, file_path: str | Path | None = None) -> ParserConfig:
        """Load parser settings.

        The file may hold the settings at the top level or under ``parser``.

        Args:
            file_path: Optional path to a YAML or JSON file

        Returns:
            Validated ParserConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: If parsing or validation fails
        """
        data: dict[str, Any] = {}
        if file_path is not None:
            data = self.parse_file(file_path)
            if isinstance(data.get("parser"), dict):
                data = data["parser"]
        data = self._apply_env_overrides(data)

        try:
            return ParserConfig(**data)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            raise ConfigError(
                "parser_validation",
                f"Invalid parser configuration in {file_path or 'environment'}:\n{error_text}",
            ) from e

    def load_rewrite_config(self, file_path: str | Path | None = None) -> RewriteConfig:
        """Load rewrite settings (constants, phrases, title styles, code blocks).

        Args:
            file_path: Optional path to a YAML or JSON file

        Returns:
            Validated RewriteConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: If parsing or validation fails
        """
        data: dict[str, Any] = {}
        if file_path is not None:
            data = _normalize_keys(self.parse_file(file_path))
        parser = data.get("parser", {})
        if isinstance(parser, dict):
            data["parser"] = self._apply_env_overrides(parser)

        try:
            config = RewriteConfig(**data)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            raise ConfigError(
                "rewrite_validation",
                f"Invalid rewrite configuration in {file_path or 'environment'}:\n{error_text}",
            ) from e

        logger.debug(
            f"Loaded rewrite configuration: {len(config.phrases)} phrase rules, "
            f"{len(config.constants)} constants"
        )
        return config

    def load_constants(self, toml_path: str | Path) -> dict[str, str]:
        """Read the ``[constants]`` table of a project TOML file.

        Args:
            toml_path: Path to the TOML file

        Returns:
            Constant names mapped to their values as strings

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: If the TOML is invalid
        """
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise FileNotFoundError(
                str(toml_path),
                f"Project file not found at {toml_path}.",
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(
                "toml_parse", f"Failed to parse TOML file {toml_path}: {str(e)}"
            ) from e

        constants = data.get("constants", {})
        if not isinstance(constants, dict):
            raise ConfigError("constants", f"[constants] in {toml_path} must be a table")
        return {str(name): str(value) for name, value in constants.items()}

    def _apply_env_overrides(self, data: dict[str, Any]) -> dict[str, Any]:
        merged = dict(data)
        for field_name in ENV_VAR_MAP:
            if field_name in merged:
                continue
            value = _get_env_value(field_name, self._env)
            if value is not None:
                merged[field_name] = value
        return merged
