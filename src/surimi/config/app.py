"""
Configuration management for the surimi mock server.

Provides YAML-based configuration with CLI overrides,
configuration hierarchy (CLI > YAML > Defaults), and validation.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from surimi.servers.websocket.models import (
    DEFAULT_HOST,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_PORT,
    MockServerConfig,
)

DEFAULT_CONFIG_FILE = "~/.surimi/config.yaml"

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


class ServerSettings(BaseModel):
    """Mock WebSocket server configuration."""

    host: str = Field(
        default=DEFAULT_HOST,
        description="Host to bind the mock server to",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        description="Port to listen on (0 lets the OS pick a free port)",
    )
    responses: list[Any] = Field(
        default_factory=list,
        description="Scripted responses, sent in order, one per inbound message",
    )
    responses_file: str | None = Field(
        default=None,
        description="YAML or JSON file holding a list of responses (appended after 'responses')",
    )
    exhaustion: Literal["sentinel", "silent"] = Field(
        default="sentinel",
        description="Behavior once responses run out: send 'No more response' or stay silent",
    )
    idle_timeout: float | None = Field(
        default=None,
        description="Close connections idle for this many seconds (None disables)",
    )
    ping_interval: float | None = Field(
        default=None,
        description="Keepalive ping interval in seconds (None disables)",
    )
    ping_timeout: float | None = Field(
        default=None,
        description="Pong timeout in seconds before considering connection dead",
    )
    max_message_size: int = Field(
        default=DEFAULT_MAX_MESSAGE_SIZE,
        description="Largest inbound message accepted, in bytes",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not (0 <= v <= 65535):
            raise ValueError("Port must be between 0 and 65535")
        return v

    @field_validator("idle_timeout", "ping_interval", "ping_timeout")
    @classmethod
    def validate_optional_positive(cls, v: float | None) -> float | None:
        """Validate value is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("max_message_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level",
    )


class SurimiConfig(BaseModel):
    """
    Main configuration for the surimi CLI.

    Configuration is loaded with the following priority:
    1. CLI arguments (highest)
    2. YAML file (~/.surimi/config.yaml)
    3. Defaults (lowest)
    """

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Mock server configuration",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    def to_server_config(self) -> MockServerConfig:
        """
        Build the immutable server configuration.

        Returns:
            MockServerConfig with inline and file responses combined

        Raises:
            ValueError: If the responses file is missing or invalid
        """
        settings = self.server
        responses = list(settings.responses)
        if settings.responses_file:
            responses.extend(load_responses(settings.responses_file))

        return MockServerConfig(
            host=settings.host,
            port=settings.port,
            responses=tuple(responses),
            exhaustion=settings.exhaustion,
            idle_timeout=settings.idle_timeout,
            ping_interval=settings.ping_interval,
            ping_timeout=settings.ping_timeout,
            max_message_size=settings.max_message_size,
        )


def expand_env_vars(content: str) -> str:
    """
    Expand ${VAR} and ${VAR:-default} references.

    ${VAR} is left unchanged when VAR is unset. ${VAR:-default} falls back
    to the default when VAR is unset or empty.

    Args:
        content: Raw configuration text

    Returns:
        Text with environment variables substituted
    """

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name)
        if default is not None:
            return value if value else default
        return value if value is not None else match.group(0)

    return _ENV_VAR_PATTERN.sub(_replace, content)


def _read_structured(path: Path) -> Any:
    """Parse a YAML or JSON file, choosing the format by extension."""
    file_ext = path.suffix.lower()
    if file_ext not in [".yaml", ".yml", ".json"]:
        raise ValueError(
            f"Config file must have .yaml, .yml, or .json extension, got: {file_ext}\n"
            f"File: {path}"
        )

    try:
        with open(path) as f:
            content = expand_env_vars(f.read())

        if file_ext == ".json":
            return json.loads(content) if content.strip() else None

        return yaml.safe_load(content)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def load_yaml(config_file: str) -> dict[str, Any]:
    """
    Load YAML or JSON configuration file.

    Args:
        config_file: Path to YAML or JSON configuration file

    Returns:
        Dictionary with parsed content, empty if the file does not exist

    Raises:
        ValueError: If YAML/JSON is invalid or file format is wrong
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    data = _read_structured(config_path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file must contain a mapping, got {type(data).__name__}: {config_path}"
        )
    return data


def load_responses(responses_file: str) -> list[Any]:
    """
    Load scripted responses from a YAML or JSON file.

    The file holds a list; each item is one response payload.

    Args:
        responses_file: Path to the responses file

    Returns:
        List of payloads in file order

    Raises:
        ValueError: If the file is missing, invalid or not a list
    """
    path = Path(responses_file).expanduser()
    if not path.exists():
        raise ValueError(f"Responses file not found: {path}")

    data = _read_structured(path)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Responses file must contain a list, got {type(data).__name__}: {path}")
    return data


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply CLI argument overrides to config dictionary.

    Args:
        config_dict: Configuration dictionary
        cli_overrides: Dictionary of CLI overrides, dotted keys for nesting
            (e.g. "server.port")

    Returns:
        Configuration dictionary with CLI overrides applied
    """
    if cli_overrides is None:
        return config_dict

    for key, value in cli_overrides.items():
        if "." in key:
            parts = key.split(".")
            current = config_dict
            for part in parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            config_dict[key] = value

    return config_dict


def generate_default_config(config_file: str) -> None:
    """
    Generate default configuration file from Pydantic model defaults.

    Args:
        config_file: Path where to create the config file
    """
    config_path = Path(config_file).expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config = SurimiConfig().model_dump(mode="python")

    with open(config_path, "w") as f:
        yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)


def load_config(
    config_file: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    create_default: bool = False,
) -> SurimiConfig:
    """
    Load configuration with hierarchy: CLI > YAML > Defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.surimi/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides
        create_default: Create default config file if it doesn't exist

    Returns:
        Validated SurimiConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_path = Path(config_file).expanduser()

    if create_default and not config_path.exists():
        generate_default_config(config_file)

    config_dict = load_yaml(config_file)
    config_dict = apply_cli_overrides(config_dict, cli_overrides)

    try:
        return SurimiConfig(**config_dict)
    except ValidationError as e:
        raise ValueError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
