"""Runtime settings read from an optional YAML file and the environment.

Resolution order, lowest to highest priority: built-in defaults, the YAML file
named by ``MY_EXPENSES_CONFIG`` (or passed explicitly), ``MY_EXPENSES_*``
environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Final

import yaml

ENV_PREFIX: Final[str] = "MY_EXPENSES_"
CONFIG_ENV_FLAG: Final[str] = f"{ENV_PREFIX}CONFIG"
ENVIRONMENTS: Final[frozenset[str]] = frozenset({"development", "production", "test"})
_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})

__all__ = ["Settings", "SettingsError", "load_settings"]


class SettingsError(ValueError):
    """Raised when a configuration value is missing or malformed."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Service configuration.

    Attributes:
      environment: One of ``development``, ``production`` or ``test``.
      host: Interface the HTTP server binds to.
      port: Port the HTTP server listens on.
      database_url: SQLAlchemy URL of the relational store.
      cors_origin: Origin allowed to call the API from a browser.
      log_level: Level name used for the service loggers.
      json_logs: Mirror logs as JSON lines under ``artifacts/logs``.
      sql_echo: Log every SQL statement; defaults to on in development only.
    """

    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 4000
    database_url: str = "sqlite:///expenses.db"
    cors_origin: str = "http://localhost:3000"
    log_level: str = "INFO"
    json_logs: bool = False
    sql_echo: bool | None = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def echo_sql(self) -> bool:
        if self.sql_echo is None:
            return self.environment == "development"
        return self.sql_echo


def _as_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise SettingsError(f"{key} must be a boolean, got {value!r}")


def _as_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"port must be an integer, got {value!r}") from exc
    if not 0 < port < 65536:
        raise SettingsError(f"port must be between 1 and 65535, got {port}")
    return port


def _coerce(raw: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(unknown)}")
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key == "port":
            values[key] = _as_port(value)
        elif key == "sql_echo":
            values[key] = None if value is None else _as_bool(value, key=key)
        elif key == "json_logs":
            values[key] = _as_bool(value, key=key)
        elif key == "environment":
            environment = str(value).strip().lower()
            if environment not in ENVIRONMENTS:
                raise SettingsError(
                    f"environment must be one of {sorted(ENVIRONMENTS)}, got {value!r}"
                )
            values[key] = environment
        elif key == "log_level":
            values[key] = str(value).strip().upper()
        else:
            values[key] = str(value)
    return values


def _read_file(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise SettingsError(f"{path} must contain a mapping at the top level")
    return payload


def _read_environment(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for f in fields(Settings):
        value = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if value is not None and value.strip() != "":
            overrides[f.name] = value
    return overrides


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings` from defaults, an optional YAML file and env vars.

    Raises:
        SettingsError: If a value cannot be parsed, a key is unknown or the
            configuration file named explicitly does not exist.
    """

    env = os.environ if environ is None else environ
    config_path = path if path is not None else env.get(CONFIG_ENV_FLAG)
    settings = Settings()
    if config_path:
        file_path = Path(config_path)
        if not file_path.exists():
            raise SettingsError(f"Configuration file not found: {file_path}")
        settings = replace(settings, **_coerce(_read_file(file_path)))
    return replace(settings, **_coerce(_read_environment(env)))
