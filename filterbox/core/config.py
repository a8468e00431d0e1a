# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
FilterBox Configuration System

Centralized configuration management supporting:
- Environment variables (FILTERBOX_*)
- Config files (~/.filterbox/config.yaml, ./.filterbox.yaml)
- Programmatic defaults
- Pydantic validation
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError

logger = logging.getLogger("filterbox.config")

ERROR_MODES = ("strict", "lax")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ============================================================================
# Configuration Models
# ============================================================================


class RenderingConfig(BaseModel):
    """Render driver configuration"""

    error_mode: str = Field(
        default="strict",
        description="strict: resolve/bind errors abort the render; "
        "lax: the failing output renders empty and the error is recorded",
    )
    register_standard_filters: bool = Field(
        default=True, description="Register the standard filter set globally at start"
    )
    parse_cache_size: int = Field(
        default=256, description="Max parsed chains kept in the parse cache", ge=0
    )

    @field_validator("error_mode")
    @classmethod
    def validate_error_mode(cls, v):
        """Validate error mode"""
        v_lower = v.lower()
        if v_lower not in ERROR_MODES:
            raise ValueError(f"Invalid error mode. Must be one of: {list(ERROR_MODES)}")
        return v_lower


class ObservabilityConfig(BaseModel):
    """Logging configuration"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(
        default=None, description="Directory for rotating log files (disabled when unset)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        v_upper = v.upper()
        if v_upper not in LOG_LEVELS:
            raise ValueError(f"Invalid log level. Must be one of: {list(LOG_LEVELS)}")
        return v_upper

    @field_validator("log_dir", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert strings to Path objects"""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v


class FilterBoxConfig(BaseModel):
    """Complete FilterBox configuration"""

    rendering: RenderingConfig = Field(
        default_factory=RenderingConfig, description="Rendering configuration"
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig, description="Logging configuration"
    )


# ============================================================================
# Configuration Loader
# ============================================================================


class ConfigLoader:
    """Load configuration from multiple sources"""

    @staticmethod
    def load_from_env() -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config: Dict[str, Any] = {}

        error_mode = os.getenv("FILTERBOX_ERROR_MODE")
        if error_mode:
            config.setdefault("rendering", {})["error_mode"] = error_mode

        standard_filters = os.getenv("FILTERBOX_STANDARD_FILTERS")
        if standard_filters:
            config.setdefault("rendering", {})["register_standard_filters"] = (
                standard_filters.lower() == "true"
            )

        cache_size = os.getenv("FILTERBOX_PARSE_CACHE_SIZE")
        if cache_size:
            try:
                config.setdefault("rendering", {})["parse_cache_size"] = int(cache_size)
            except ValueError as e:
                raise ConfigError(
                    "FILTERBOX_PARSE_CACHE_SIZE must be an integer",
                    details={"value": cache_size},
                    cause=e,
                )

        log_level = os.getenv("FILTERBOX_LOG_LEVEL")
        if log_level:
            config.setdefault("observability", {})["log_level"] = log_level

        log_dir = os.getenv("FILTERBOX_LOG_DIR")
        if log_dir:
            config.setdefault("observability", {})["log_dir"] = log_dir

        return config

    @staticmethod
    def load_from_file(file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config file {file_path}", cause=e)

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {file_path} must contain a mapping")
        return data

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple configuration dictionaries"""
        result: Dict[str, Any] = {}
        for config in configs:
            for key, value in config.items():
                if (
                    key in result
                    and isinstance(result[key], dict)
                    and isinstance(value, dict)
                ):
                    result[key] = ConfigLoader.merge_configs(result[key], value)
                else:
                    result[key] = value
        return result


# ============================================================================
# Global Configuration Instance
# ============================================================================

_config: Optional[FilterBoxConfig] = None


def get_config() -> FilterBoxConfig:
    """
    Get global FilterBox configuration

    Configuration is loaded from (in order of precedence):
    1. Environment variables (FILTERBOX_*)
    2. .filterbox.yaml in current directory
    3. ~/.filterbox/config.yaml
    4. Default values
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config


def load_config(
    config_file: Optional[Path] = None, env_override: bool = True
) -> FilterBoxConfig:
    """
    Load configuration from all sources

    Args:
        config_file: Optional specific config file to load
        env_override: Whether environment variables override file config

    Raises:
        ConfigError: If a source is unreadable or the merged config is invalid
    """
    configs = []

    default_locations = [
        Path.home() / ".filterbox" / "config.yaml",
        Path.cwd() / ".filterbox.yaml",
    ]

    for location in default_locations:
        file_config = ConfigLoader.load_from_file(location)
        if file_config:
            configs.append(file_config)
            logger.debug(f"Loaded config from {location}")

    if config_file:
        file_config = ConfigLoader.load_from_file(Path(config_file))
        if file_config:
            configs.append(file_config)
            logger.debug(f"Loaded config from {config_file}")

    if env_override:
        env_config = ConfigLoader.load_from_env()
        if env_config:
            configs.append(env_config)
            logger.debug("Loaded config from environment")

    merged = ConfigLoader.merge_configs(*configs) if configs else {}

    try:
        return FilterBoxConfig(**merged)
    except ValidationError as e:
        raise ConfigError("Config validation failed", details={"errors": e.errors()}, cause=e)


def set_config(config: Optional[FilterBoxConfig]):
    """Replace the global configuration (None forces a reload on next access)"""
    global _config
    _config = config


def reload_config(config_file: Optional[Path] = None) -> FilterBoxConfig:
    """Reload global configuration"""
    global _config
    _config = load_config(config_file)
    logger.info("Configuration reloaded")
    return _config
