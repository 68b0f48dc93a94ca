"""Run configuration loading and validation.

Loads the documentation run configuration from a JSON or YAML file. The
.NET-style ``appsettings.json`` shape (``OutputFolder`` / ``ConnectionString``)
is accepted as-is: keys are matched case-insensitively, ignoring
underscores.
"""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from catalog_docs.db_introspect import infer_dialect

CONFIG_ENV_VAR = "CATALOG_DOCS_CONFIG"
DEFAULT_CONFIG_FILE = "appsettings.json"


def _normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


class DocsConfig(BaseModel):
    """Configuration for one documentation run."""
    output_folder: Path = Field(..., description="Folder the documents are written to")
    connection_string: str = Field(..., description="Database connection string or DSN")
    dialect: Literal["sqlserver", "postgres"] | None = Field(
        None, description="Catalog dialect; inferred from the connection string when omitted"
    )
    schemas: list[str] = Field(default_factory=list, description="Schemas to document (empty = all)")
    clean_output: bool = Field(True, description="Empty the output folder before writing")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Map keys like ``OutputFolder`` or ``output-folder`` onto field names."""
        if not isinstance(data, dict):
            return data
        fields = {_normalize_key(name): name for name in cls.model_fields}
        return {fields.get(_normalize_key(str(k)), k): v for k, v in data.items()}

    @field_validator("connection_string")
    @classmethod
    def validate_connection_string(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("connection_string must not be empty")
        return v

    @field_validator("output_folder", mode="before")
    @classmethod
    def validate_output_folder(cls, v: Any) -> Any:
        if v is None or not str(v).strip():
            raise ValueError("output_folder must not be empty")
        return v

    @field_validator("dialect", "log_level", mode="before")
    @classmethod
    def normalize_case(cls, v: Any, info) -> Any:
        if isinstance(v, str):
            return v.upper() if info.field_name == "log_level" else v.lower()
        return v

    @classmethod
    def from_file(cls, path: str | Path) -> DocsConfig:
        """Load configuration from a JSON or YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Validated DocsConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is empty or invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8-sig") as f:
            try:
                if config_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    def resolved_dialect(self) -> str:
        """Configured dialect, or the one implied by the connection string."""
        return self.dialect or infer_dialect(self.connection_string)

    def log_redacted(self) -> dict:
        """Get configuration dict with the connection password redacted."""
        config_dict = self.model_dump(mode="json")
        config_dict["connection_string"] = redact_connection_string(self.connection_string)
        return config_dict


_URL_PASSWORD = re.compile(r"^(?P<prefix>[a-zA-Z][\w+.-]*://[^:/@]+:).*(?P<suffix>@[^@]*)$")
_KEYVALUE_PASSWORD = re.compile(r"(?i)\b(password|pwd)\s*=\s*(\{[^}]*\}|[^;]*)")


def redact_connection_string(connection_string: str) -> str:
    """Mask the password in a URL DSN or key=value connection string."""
    match = _URL_PASSWORD.match(connection_string)
    if match:
        return f"{match.group('prefix')}***{match.group('suffix')}"
    return _KEYVALUE_PASSWORD.sub(lambda m: f"{m.group(1)}=***", connection_string)


def find_config_path(config_path: str | Path | None = None) -> Path:
    """Pick the config file for this run.

    Order: explicit path, then $CATALOG_DOCS_CONFIG (a .env file is
    honoured), then appsettings.json in the working directory. The returned
    path is not checked for existence.
    """
    if config_path:
        return Path(config_path)

    load_dotenv()
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    return Path(DEFAULT_CONFIG_FILE)


def load_config(config_path: str | Path | None = None) -> DocsConfig:
    """Load and validate the run configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If configuration is invalid
    """
    return DocsConfig.from_file(find_config_path(config_path))
