"""Configuration management for catalog-docs."""
from .settings import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    DocsConfig,
    find_config_path,
    load_config,
    redact_connection_string,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILE",
    "DocsConfig",
    "find_config_path",
    "load_config",
    "redact_connection_string",
]
