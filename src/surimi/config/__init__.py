"""
Configuration package for the surimi CLI.

Pydantic models for file-based configuration, loaded with the
hierarchy CLI > YAML/JSON file > defaults.
"""

from surimi.config.app import (
    LoggingSettings,
    ServerSettings,
    SurimiConfig,
    apply_cli_overrides,
    expand_env_vars,
    generate_default_config,
    load_config,
    load_responses,
    load_yaml,
)

__all__ = [
    "LoggingSettings",
    "ServerSettings",
    "SurimiConfig",
    "apply_cli_overrides",
    "expand_env_vars",
    "generate_default_config",
    "load_config",
    "load_responses",
    "load_yaml",
]
