"""Configuration loading and validation for rps.

This module provides:
- Pydantic models for configuration validation
- YAML config file discovery and loading
- Environment variable expansion in config values
- Merging of config file with defaults and CLI overrides
- Clear, user-friendly error messages for config issues
"""

from difflib import get_close_matches
import os
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from rps.config.defaults import DEFAULT_CONFIG


class ConfigError(Exception):
    """Base exception for configuration errors.

    Attributes:
        message: The main error message
        file_path: Path to the config file (if applicable)
        line_number: Line number where the error occurred (if known)
        column: Column where the error occurred (if known)
        suggestion: Helpful suggestion for fixing the error
        context_lines: Offending source lines, shown under the message
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        line_number: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        context_lines: list[str] | None = None,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        self.column = column
        self.suggestion = suggestion
        self.context_lines = context_lines
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Render location, message, pointer and suggestion as one block."""
        if self.file_path:
            where = f" line {self.line_number}" if self.line_number else ""
            parts = [f"Error in {self.file_path}{where}:"]
        else:
            parts = ["Configuration error:"]
        parts.append(f"  {self.message}")

        if self.context_lines and self.column:
            parts.append("")
            parts.extend(f"    {line}" for line in self.context_lines)
            parts.append(" " * (self.column + 3) + "^")

        if self.suggestion:
            parts.extend(["", f"  Suggestion: {self.suggestion}"])

        return "\n".join(parts)


class ConfigSyntaxError(ConfigError):
    """Error for YAML syntax issues."""


class ConfigValidationError(ConfigError):
    """Error for configuration value validation failures."""


# Known keys per section, used for "did you mean" suggestions
VALID_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {"hosts", "agent", "output", "logging", "error_reporting"},
    ("agent",): {"scheme", "path", "timeout", "retries", "concurrency"},
    ("output",): {"format", "pretty_print"},
    ("logging",): {"enabled", "level", "file"},
    ("error_reporting",): {"enabled", "dsn", "environment"},
}

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _suggest_key(unknown_key: str, valid_keys: set[str]) -> str | None:
    """Suggest a similar valid key for an unknown key."""
    matches = get_close_matches(unknown_key, sorted(valid_keys), n=1, cutoff=0.6)
    return f"Did you mean '{matches[0]}'?" if matches else None


# Checked in order: bool before int
_TYPE_NAMES: tuple[tuple[type, str], ...] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (list, "list"),
    (dict, "object"),
)


def _describe(value: Any) -> str:
    """Describe a config value for an error message, e.g. ``string "xml"``."""
    if value is None:
        return "null"
    if isinstance(value, str):
        return f'string "{value}"'
    for kind, label in _TYPE_NAMES:
        if isinstance(value, kind):
            return label
    return type(value).__name__


def _value_at(data: Any, loc: tuple[Any, ...]) -> Any:
    """Follow a pydantic error location into the raw config data."""
    for key in loc:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int) and key < len(data):
            data = data[key]
        else:
            return None
    return data


_OUT_OF_RANGE = "Value for '{path}' is out of range: {value}"
_BAD_NUMBER = ("Invalid number for '{path}': got {got}", "Please provide a valid number")
_BAD_BOOL = ("Expected boolean for '{path}': got {got}", "Use 'true' or 'false'")

# pydantic error type -> (message, suggestion). Templates see the dotted
# key as {path}, the raw value as {value}, its description as {got}, plus
# the error's ctx entries.
_ERROR_TEMPLATES: dict[str, tuple[str, str | None]] = {
    "literal_error": ("Invalid value for '{path}': got {got}", "Expected one of: {expected}"),
    "greater_than_equal": (_OUT_OF_RANGE, "Value must be at least {ge}"),
    "greater_than": (_OUT_OF_RANGE, "Value must be greater than {gt}"),
    "less_than_equal": (_OUT_OF_RANGE, "Value must be at most {le}"),
    "less_than": (_OUT_OF_RANGE, "Value must be less than {lt}"),
    "int_parsing": _BAD_NUMBER,
    "float_parsing": _BAD_NUMBER,
    "int_from_float": ("Expected a whole number for '{path}': got {value}", None),
    "string_type": ("Expected text for '{path}': got {got}", None),
    "bool_type": _BAD_BOOL,
    "bool_parsing": _BAD_BOOL,
    "list_type": (
        "Expected a list for '{path}': got {got}",
        "Use a list such as [web01, web02:8080] or a comma-separated string",
    ),
}


def _format_pydantic_error(
    error: ValidationError,
    config_data: dict[str, Any],
    file_path: str | None = None,
) -> ConfigValidationError:
    """Convert a Pydantic ValidationError to a ConfigValidationError.

    Only the first reported error is described; fixing it and re-running
    surfaces the next one.

    Args:
        error: The Pydantic validation error
        config_data: The merged config data, used to quote the bad value
        file_path: Path to the config file

    Returns:
        A ConfigValidationError with message and suggestion
    """
    errors = error.errors()
    if not errors:
        return ConfigValidationError("Configuration validation failed", file_path=file_path)

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    path = ".".join(str(part) for part in loc)
    error_type = first.get("type", "")

    if error_type == "extra_forbidden":
        valid_keys = VALID_KEYS.get(loc[:-1], set())
        suggestion = _suggest_key(str(loc[-1]), valid_keys) if loc else None
        return ConfigValidationError(
            f"Unknown configuration key '{path}'",
            file_path=file_path,
            suggestion=suggestion or "Check the README for valid configuration options",
        )

    template = _ERROR_TEMPLATES.get(error_type)
    if template is None:
        return ConfigValidationError(
            f"Invalid value for '{path}': {first.get('msg', 'invalid value')}",
            file_path=file_path,
        )

    value = _value_at(config_data, loc)
    fields = {**(first.get("ctx") or {}), "path": path, "value": value, "got": _describe(value)}
    message, suggestion = template
    return ConfigValidationError(
        message.format(**fields),
        file_path=file_path,
        suggestion=suggestion.format(**fields) if suggestion else None,
    )


# Substring of the lowercased PyYAML error -> hint
_YAML_HINTS: tuple[tuple[str, str], ...] = (
    ("could not find expected ':'", "Every key needs a colon, e.g. 'timeout: 5'"),
    ("mapping values are not allowed", "Nested keys must be indented under their section"),
    ("cannot start any token", "Indent with spaces; YAML does not allow tabs"),
    ("found undefined alias", "Define each anchor (&name) before using it (*name)"),
)


def _format_yaml_error(
    error: yaml.YAMLError,
    file_path: str | None = None,
    content: str | None = None,
) -> ConfigSyntaxError:
    """Convert a PyYAML error to a ConfigSyntaxError pointing at the bad line."""
    text = str(error).lower()
    hint = next((h for needle, h in _YAML_HINTS if needle in text), None)
    problem = getattr(error, "problem", None)
    message = f"YAML syntax error: {problem}" if problem else "Invalid YAML syntax"

    mark = getattr(error, "problem_mark", None)
    if mark is None:
        return ConfigSyntaxError(message, file_path=file_path, suggestion=hint)

    lines = (content or "").splitlines()
    return ConfigSyntaxError(
        message,
        file_path=file_path,
        line_number=mark.line + 1,
        column=mark.column + 1,
        context_lines=[lines[mark.line]] if mark.line < len(lines) else None,
        suggestion=hint,
    )


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax. Unset variables without a
    default are left untouched.
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def parse_hosts(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated host list, dropping blanks.

    Accepts a single string (``"web01,web02:8080"``) or a list whose items
    may themselves be comma-separated.
    """
    if not value:
        return []
    items = [value] if isinstance(value, str) else value
    hosts: list[str] = []
    for item in items:
        for host in str(item).split(","):
            host = host.strip()
            if host:
                hosts.append(host)
    return hosts


# Pydantic Configuration Models


class AgentConfig(BaseModel):
    """Remote agent connection settings."""

    model_config = ConfigDict(extra="forbid")

    scheme: Literal["http", "https"] = "http"
    path: str = "/v1/proc"
    timeout: float = Field(default=10.0, gt=0, le=300)
    retries: int = Field(default=1, ge=1, le=10)
    concurrency: int = Field(default=8, ge=1, le=256)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure the endpoint path is absolute."""
        if not v.startswith("/"):
            return "/" + v
        return v


class OutputConfig(BaseModel):
    """Report output configuration."""

    model_config = ConfigDict(extra="forbid")

    format: Literal["ps", "json"] = "ps"
    pretty_print: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: str | None = None


class ErrorReportingConfig(BaseModel):
    """Sentry error reporting configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    dsn: str = ""
    environment: str = "production"


class Config(BaseModel):
    """Main configuration model for rps.

    Loaded from YAML files and overridden by CLI flags.
    """

    model_config = ConfigDict(extra="forbid")

    hosts: list[str] = Field(default_factory=list)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    error_reporting: ErrorReportingConfig = Field(default_factory=ErrorReportingConfig)

    @field_validator("hosts", mode="before")
    @classmethod
    def validate_hosts(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str) or (
            isinstance(v, list) and all(isinstance(item, str) for item in v)
        ):
            return parse_hosts(v)
        return v


def _default_locations() -> tuple[Path, ...]:
    """Per-user config files, most preferred first."""
    home = Path.home()
    return (home / ".config" / "rps" / "config.yaml", home / ".rps" / "config.yaml")


def get_config_path(custom_path: str | None = None) -> Path | None:
    """Determine the configuration file path.

    Checks locations in this order:
    1. Custom path (if provided via --config flag)
    2. RPS_CONFIG_PATH environment variable
    3. ~/.config/rps/config.yaml (XDG standard)
    4. ~/.rps/config.yaml (legacy location)

    A missing --config file is an error; a missing RPS_CONFIG_PATH file
    means "no config file" and the defaults apply.

    Args:
        custom_path: Optional custom config path from CLI

    Returns:
        Path to config file if found, None otherwise

    Raises:
        FileNotFoundError: If custom_path is given but does not exist
    """
    if custom_path:
        path = Path(custom_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {custom_path}")
        return path

    env_path = os.environ.get("RPS_CONFIG_PATH")
    if env_path:
        path = Path(env_path).expanduser()
        return path if path.exists() else None

    return next((path for path in _default_locations() if path.exists()), None)


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a dict (empty for an empty file)."""
    content = path.read_text()
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise _format_yaml_error(e, str(path), content) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Expected a mapping at the top level, got {_describe(data)}",
            file_path=str(path),
            suggestion="Start the file with keys such as 'hosts:' or 'agent:'",
        )
    return data


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> Config:
    """Load and validate configuration.

    Layers, later overriding earlier: DEFAULT_CONFIG, the config file (if
    one is found), then ``cli_overrides``. ``${VAR}`` references are
    expanded after merging.

    Args:
        config_path: Optional custom config file path
        cli_overrides: Optional dict of CLI argument overrides

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If custom config path doesn't exist
        ConfigSyntaxError: If config file has invalid YAML syntax
        ConfigValidationError: If config values are invalid
    """
    path = get_config_path(config_path)

    config_data: dict[str, Any] = DEFAULT_CONFIG
    for layer in (_read_config_file(path) if path else None, cli_overrides):
        if layer:
            config_data = deep_merge(config_data, layer)
    config_data = expand_env_vars(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise _format_pydantic_error(e, config_data, str(path) if path else None) from e
