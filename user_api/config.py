"""Configuration management for the user directory service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .errors import ConfigError

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_API_TOKEN = "thisIsASecretToken"
DEFAULT_LOG_LEVEL = "INFO"

_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings for the HTTP service."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_token: str = DEFAULT_API_TOKEN
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from the ``service`` section of a config file."""
        unknown = set(data.keys()) - {"host", "port", "api_token", "log_level"}
        if unknown:
            raise ConfigError(f"Unknown service configuration fields: {', '.join(sorted(unknown))}")

        return ServiceConfig(
            host=str(data.get("host", DEFAULT_HOST)),
            port=_parse_port(data.get("port", DEFAULT_PORT)),
            api_token=_parse_token(data.get("api_token", DEFAULT_API_TOKEN)),
            log_level=_parse_log_level(data.get("log_level", DEFAULT_LOG_LEVEL)),
        )

    def with_environment(self, environ: Mapping[str, str]) -> "ServiceConfig":
        """Return a copy with ``USER_API_*`` environment overrides applied."""
        overrides: Dict[str, object] = {}
        if environ.get("USER_API_HOST"):
            overrides["host"] = environ["USER_API_HOST"].strip()
        if environ.get("USER_API_PORT"):
            overrides["port"] = _parse_port(environ["USER_API_PORT"])
        if environ.get("USER_API_TOKEN"):
            overrides["api_token"] = _parse_token(environ["USER_API_TOKEN"])
        if environ.get("USER_API_LOG_LEVEL"):
            overrides["log_level"] = _parse_log_level(environ["USER_API_LOG_LEVEL"])
        return replace(self, **overrides)


def _parse_port(value: object) -> int:
    try:
        port = int(str(value))
    except ValueError as exc:
        raise ConfigError(f"Invalid port: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ConfigError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_token(value: object) -> str:
    token = str(value).strip() if value is not None else ""
    if not token:
        raise ConfigError("API token must not be empty")
    return token


def _parse_log_level(value: object) -> str:
    level = str(value).strip().upper()
    if level not in _VALID_LOG_LEVELS:
        raise ConfigError(f"Unsupported log level: {value!r}")
    return level


def load_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    required: bool = False,
) -> ServiceConfig:
    """Load settings from an optional YAML file, then apply environment overrides."""
    config = ServiceConfig()
    if required and (config_path is None or not config_path.is_file()):
        raise ConfigError(f"Configuration file not found: {config_path}")
    if config_path is not None and config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                raw = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping")
        section = raw.get("service") or {}
        if not isinstance(section, dict):
            raise ConfigError("The 'service' key must contain a mapping")
        config = ServiceConfig.from_dict(section)

    return config.with_environment(os.environ if environ is None else environ)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "service.yaml").resolve(strict=False)
    return candidate


__all__ = [
    "DEFAULT_API_TOKEN",
    "ServiceConfig",
    "load_config",
    "resolve_config_path",
]
