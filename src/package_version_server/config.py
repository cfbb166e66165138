"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables         (PVS__REGISTRY__DEFAULT_URL=https://...)
  2. package-version-server.yaml   (searched in cwd, then the user config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_CONFIG_FILENAME = "package-version-server.yaml"
_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("package-version-server")

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


def _find_config_file() -> str | None:
    """Return the path of the first config file found, or None."""
    candidates = [
        Path(_CONFIG_FILENAME),
        Path(_DEFAULT_CONFIG_DIR) / _CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_url: str = DEFAULT_REGISTRY_URL
    # scope → registry base URL  e.g. "@acme" → "https://npm.acme.dev"
    scopes: dict[str, str] = {}
    timeout_seconds: float = 10.0

    @field_validator("default_url")
    @classmethod
    def strip_default_url(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, v: dict[str, str]) -> dict[str, str]:
        for scope in v:
            if not scope.startswith("@"):
                raise ValueError(f"Scope must start with '@': {scope!r}")
        return {scope: url.rstrip("/") for scope, url in v.items()}

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Share one in-flight fetch between concurrent misses for the same package.
    coalesce_requests: bool = False


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PVS__LOGGING__LEVEL=DEBUG
        env_prefix="PVS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    registry: RegistrySettings = RegistrySettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
