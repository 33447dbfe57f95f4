"""Configuration management for the Certfix CLI."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

_config_logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.certfix.io"


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class APISettings(BaseModel):
    endpoint: str = Field(default=DEFAULT_ENDPOINT)
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    retry_attempts: int = Field(default=3, ge=0, le=10)

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        return normalize_endpoint(value)


class PathSettings(BaseModel):
    config_dir: str
    config_file: str
    token_file: str


class Settings(BaseModel):
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    paths: PathSettings


ENV_KEYS = {
    "home": "CERTFIX_HOME",
    "endpoint": "CERTFIX_ENDPOINT",
    "timeout": "CERTFIX_TIMEOUT",
    "retry_attempts": "CERTFIX_RETRY_ATTEMPTS",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}

# Keys understood in config.yaml, mapped to the type they are stored as.
CONFIG_FILE_KEYS: dict[str, type] = {
    "endpoint": str,
    "timeout": float,
    "retry_attempts": int,
}

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def normalize_endpoint(value: str) -> str:
    """Validate an API endpoint URL and strip any trailing slash."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("endpoint must not be empty")

    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValueError("endpoint must use http or https")
    if not parsed.netloc:
        raise ValueError("endpoint must include host")
    if parsed.query or parsed.fragment:
        raise ValueError("endpoint must not include query or fragment")
    return f"{parsed.scheme.lower()}://{parsed.netloc}{parsed.path.rstrip('/')}"


def default_config_dir() -> Path:
    home = os.getenv(ENV_KEYS["home"])
    if home:
        return Path(home).expanduser()
    return Path.home() / ".certfix"


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _config_logger.warning(
            "Invalid float value for %s: %r, using default %s", key, value, default
        )
        return default


def _file_number(values: dict[str, object], key: str, kind: type, default: float) -> float:
    raw = values.get(key)
    if raw is None:
        return default
    try:
        return kind(raw)
    except (TypeError, ValueError):
        _config_logger.warning(
            "Invalid %s value in config file: %r, using default %s", key, raw, default
        )
        return default


def read_config_file(path: Path) -> dict[str, object]:
    """Return the persisted configuration mapping, empty when the file is absent."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Invalid configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Invalid configuration file {path}: expected a mapping")
    return data


def _coerce_config_value(key: str, value: str) -> object:
    kind = CONFIG_FILE_KEYS.get(key)
    if kind is None or kind is str:
        return value
    try:
        return kind(value)
    except ValueError as exc:
        raise ValueError(f"Configuration key '{key}' expects a {kind.__name__}") from exc


def set_config_value(path: Path, key: str, value: str) -> None:
    """Persist a single key into the configuration file, creating it if needed."""
    data = read_config_file(path)
    if key == "endpoint":
        value = normalize_endpoint(value)
    data[key] = _coerce_config_value(key, value)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, default_flow_style=False, sort_keys=True)
    _load_settings_cached.cache_clear()


def get_config_value(path: Path, key: str) -> object:
    data = read_config_file(path)
    if key not in data:
        raise KeyError(f"configuration key '{key}' not found")
    return data[key]


def load_settings(config_file: str | None = None) -> Settings:
    """Load configuration and cache the result.

    Precedence, lowest first: built-in defaults, the persisted config file,
    environment variables (including a ``.env`` file in the working directory).
    """

    return _load_settings_cached(config_file)


@lru_cache(maxsize=4)
def _load_settings_cached(config_file: str | None) -> Settings:
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    config_dir = default_config_dir()
    config_path = Path(config_file).expanduser() if config_file else config_dir / "config.yaml"
    file_values = read_config_file(config_path)

    defaults = APISettings()
    endpoint = os.getenv(ENV_KEYS["endpoint"]) or file_values.get("endpoint", defaults.endpoint)
    log_file_env = os.getenv(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "api": {
            "endpoint": endpoint,
            "timeout_seconds": _env_float(
                ENV_KEYS["timeout"],
                _file_number(file_values, "timeout", float, defaults.timeout_seconds),
            ),
            "retry_attempts": _env_int(
                ENV_KEYS["retry_attempts"],
                _file_number(file_values, "retry_attempts", int, defaults.retry_attempts),
            ),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": str(Path(log_file_env).expanduser()) if log_file_env else None,
        },
        "paths": {
            "config_dir": str(config_dir),
            "config_file": str(config_path),
            "token_file": str(config_dir / "token.json"),
        },
    }

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
