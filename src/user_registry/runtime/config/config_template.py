"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.user_registry.runtime.config.config_data import ConfigData
from src.user_registry.runtime.config.settings import EnvironmentVariables

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return _PLACEHOLDER.sub(replacer, text)


def _promote_environment_prefixed_vars(env_mode: str) -> None:
    """Expose ``<ENV>_FOO`` variables as ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    for var_name, var_value in list(os.environ.items()):
        if var_name.startswith(prefix):
            os.environ[var_name[len(prefix):]] = var_value
            logger.debug("Set environment variable {} from {}", var_name[len(prefix):], var_name)


def _apply_environment_overrides(config: ConfigData, env_vars: EnvironmentVariables) -> ConfigData:
    if env_vars.environment:
        config.app.environment = env_vars.environment
        config.database.environment_mode = env_vars.environment
    if env_vars.log_level:
        config.logging.level = env_vars.log_level
    if env_vars.database_url:
        config.database.url = env_vars.database_url
    return config


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    A missing file is not an error: the defaults of ``ConfigData`` are used,
    still subject to the environment variable overrides.

    Raises:
        ValueError: If required environment variables are missing or the
            YAML does not describe a valid configuration
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    _promote_environment_prefixed_vars(env_mode)

    config_section: dict = {}
    if file_path.exists():
        content = substitute_env_vars(file_path.read_text())
        try:
            loaded = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML: {e}") from e
        config_section = loaded.get("config", {}) or {}
    else:
        logger.warning("Configuration file {} not found; using defaults", file_path)

    try:
        config = ConfigData(**config_section)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return _apply_environment_overrides(config, EnvironmentVariables())
