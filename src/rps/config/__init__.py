"""Configuration module for rps.

This module provides:
- Pydantic models for configuration validation
- YAML config file loading and discovery
- Default configuration values
- Environment variable expansion
- Clear error messages for config issues
"""

from rps.config.defaults import DEFAULT_CONFIG
from rps.config.loader import (
    AgentConfig,
    Config,
    ConfigError,
    ConfigSyntaxError,
    ConfigValidationError,
    ErrorReportingConfig,
    LoggingConfig,
    OutputConfig,
    get_config_path,
    load_config,
    parse_hosts,
)

__all__ = [
    "Config",
    "AgentConfig",
    "ConfigError",
    "ConfigSyntaxError",
    "ConfigValidationError",
    "ErrorReportingConfig",
    "LoggingConfig",
    "OutputConfig",
    "DEFAULT_CONFIG",
    "get_config_path",
    "load_config",
    "parse_hosts",
]
