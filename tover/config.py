"""
Configuration loading for tover.

Settings are layered: built-in defaults, then an optional YAML file, then
environment variables (a .env file is loaded first via python-dotenv).

Example YAML:

    database:
      host: localhost
      port: 5432
      name: tover
      user: tover
    imports:
      write_batch_size: 500
    forecast:
      horizon_days: 14
      lookback_days: 7
    logging:
      level: INFO
      format: json
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "DB_HOST": ("database", "host"),
    "DB_PORT": ("database", "port"),
    "DB_NAME": ("database", "name"),
    "DB_USER": ("database", "user"),
    "DB_PASSWORD": ("database", "password"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "TOVER_WORKSPACE_ID": (None, "workspace_id"),
}


class DatabaseConfig(BaseModel):
    """PostgreSQL connection settings."""

    host: str = "localhost"
    port: int = Field(5432, gt=0, le=65535)
    name: str = "tover"
    user: str = "tover"
    password: str | None = None
    min_pool_size: int = Field(1, ge=1)
    max_pool_size: int = Field(10, ge=1)
    timeout: float = Field(30.0, gt=0)

    def pool_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for DatabaseConnectionPool."""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.name,
            "user": self.user,
            "password": self.password,
            "min_size": self.min_pool_size,
            "max_size": self.max_pool_size,
            "timeout": self.timeout,
        }


class ImportConfig(BaseModel):
    """Batch sizes used when persisting an upload."""

    write_batch_size: int = Field(500, ge=1)
    lookup_batch_size: int = Field(100, ge=1)


class ForecastConfig(BaseModel):
    """Critical-stock forecast defaults."""

    horizon_days: int = Field(14, ge=1)
    lookback_days: int = Field(7, ge=1)
    max_items: int = Field(50, ge=1)
    lookup_batch_size: int = Field(100, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"

    @field_validator("level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("format must be 'json' or 'text'")
        return v


class ToverConfig(BaseModel):
    """Top-level application settings."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)
    forecast: ForecastConfig = Field(default_factory=ForecastConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace_id: str | None = None


def _read_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def _apply_env(data: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        if section is None:
            data[key] = value
        else:
            data.setdefault(section, {})[key] = value
    return data


def load_config(
    path: str | Path | None = None,
    env_file: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> ToverConfig:
    """
    Load configuration.

    Args:
        path: Optional YAML config file
        env_file: Optional .env file (defaults to ./.env if present)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ToverConfig

    Raises:
        FileNotFoundError: If path is given but does not exist
        pydantic.ValidationError: If a value is invalid
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file, override=False)
        environ = dict(os.environ)

    data: dict[str, Any] = _read_yaml(path) if path else {}
    return ToverConfig.model_validate(_apply_env(data, environ))
