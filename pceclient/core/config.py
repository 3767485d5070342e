"""
Configuration Management.

Loads secrets from config/.env, settings from config/settings/*.yaml and
runtime toggles from the process environment.

Secrets (.env):
    PCE_USER, PCE_API_KEY

Settings (YAML):
    pce.yaml      - PCE address, TLS/proxy policy, retry and polling limits
    logging.yaml  - Logging configuration

Runtime toggles (environment):
    PCE_FORCE_ASYNC - send every request with Prefer: respond-async
    PCE_VERBOSE     - emit debug diagnostics from the HTTP layer
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pceclient.core.config_schema import LoggingSchema, PCESchema


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Credentials loaded from config/.env. Only the API user and key."""

    pce_user: str
    pce_api_key: str

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class RuntimeToggles(BaseSettings):
    """Debugging switches read from the process environment."""

    force_async: bool = False
    verbose: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PCE_",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._pce = _load_validated(PCESchema, "pce.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def pce(self) -> PCESchema:
        """PCE connection settings."""
        return self._pce

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached credentials. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


@lru_cache
def get_runtime_toggles() -> RuntimeToggles:
    """Get cached runtime toggles from the environment."""
    return RuntimeToggles()
