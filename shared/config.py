"""
Shared configuration management for the Mojang API proxy.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


CONFIG_FILE_ENV = "MOJANG_PROXY_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "config.json"


class CacheConfig(BaseModel):
    """Cache lifetime settings, in seconds."""

    ttl: int = Field(default=600, ge=0)
    checkperiod: int = Field(default=120, ge=0)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="MOJANG_PROXY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = "local"
    log_level: str = "info"


class ProxyConfig(BaseConfig):
    """Configuration of the proxy service."""

    service_name: str = "mojang_proxy"
    host: str = "0.0.0.0"
    port: int = 8080

    cache: CacheConfig = Field(default_factory=CacheConfig)
    max_mojang_profile_requests_per_minute: int = Field(default=25, ge=0)

    # Upstream
    username_api_url: str = "https://api.mojang.com/users/profiles/minecraft"
    profile_api_url: str = "https://sessionserver.mojang.com/session/minecraft/profile"
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Static assets served at /
    static_dir: str = "index"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment variables override values read from the config file,
        # which arrive as init kwargs.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON config file shaped like the service options."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Config file {path} is not valid JSON",
            details={"path": str(path), "error": str(exc)},
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            f"Config file {path} could not be read",
            details={"path": str(path), "error": str(exc)},
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a JSON object",
            details={"path": str(path)},
        )
    return data


def get_config(config_file: Optional[Union[str, Path]] = None) -> ProxyConfig:
    """
    Build the proxy configuration.

    The JSON file named by ``config_file`` (or ``MOJANG_PROXY_CONFIG_FILE``,
    falling back to ``config.json``) is optional unless named explicitly.
    """
    explicit = config_file is not None or CONFIG_FILE_ENV in os.environ
    path = Path(config_file or os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE))

    values: Dict[str, Any] = {}
    if path.is_file():
        values = read_config_file(path)
    elif explicit:
        raise ConfigurationError(
            f"Config file {path} does not exist",
            details={"path": str(path)},
        )

    try:
        return ProxyConfig(**values)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            "Invalid configuration",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
