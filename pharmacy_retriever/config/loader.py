from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import RewardTable, SourceDescriptor

"""Config loader for the pharmacy list retriever.

Responsibilities:
- Load the source list (xls_urls.yml) and the reward tables (reward.yml)
- Validate both against the JSON schemas shipped in config/schemas/
- Build runtime settings from environment variables (.env is loaded by the CLI)
"""

SCHEMA_DIR = Path(__file__).parent / "schemas"
SOURCES_SCHEMA_PATH = SCHEMA_DIR / "sources_schema.json"
REWARD_SCHEMA_PATH = SCHEMA_DIR / "reward_schema.json"

DEFAULT_SOURCES_PATH = "xls_urls.yml"
DEFAULT_REWARD_PATH = "reward.yml"
DEFAULT_OUTPUT_PATH = "pharmacy.json"
DEFAULT_GEOCODE_URL = "https://geocode.csis.u-tokyo.ac.jp/cgi-bin/simple_geocode.cgi"
DEFAULT_GEOCODE_RETRY = 10
DEFAULT_GEOCODE_BACKOFF = 10.0
DEFAULT_HTTP_TIMEOUT = 30.0


class ConfigError(Exception):
    pass


class ConfigMissingError(ConfigError):
    """Raised when a required configuration file does not exist."""


@dataclass(frozen=True)
class RetrieverConfig:
    sources_path: Path
    reward_path: Path
    output_path: Path
    geocode_url: str
    geocode_retry: int
    geocode_backoff: float  # 秒。attempt i の前に backoff * i 待機
    http_timeout: float


def _validate_schema(data: Any, schema_path: Path) -> None:
    """Validate loaded YAML data against a JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            fails validation.
    """
    if not schema_path.exists():
        raise ConfigError(f"config schema not found: {schema_path}")

    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise ConfigMissingError(f"config file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e


def load_sources(path: Path) -> list[SourceDescriptor]:
    data = _read_yaml(path)
    _validate_schema(data, SOURCES_SCHEMA_PATH)
    return [
        SourceDescriptor(
            department=entry["department"],
            excel_urls=tuple(entry["excel_url"]),
            reward_id=str(entry["reward_id"]),
            origin_url=entry.get("originURL") or "",
            desc=entry.get("desc") or "",
        )
        for entry in data
    ]


def load_reward_tables(path: Path) -> list[RewardTable]:
    data = _read_yaml(path) or []
    _validate_schema(data, REWARD_SCHEMA_PATH)
    return [RewardTable(id=str(entry["id"]), reward=dict(entry["reward"])) for entry in data]


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer: {raw!r}") from e
    if value < 1:
        raise ConfigError(f"{key} must be >= 1: {value}")
    return value


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number: {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{key} must be >= 0: {value}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> RetrieverConfig:
    """Build runtime settings from environment variables.

    Unset variables fall back to the defaults
    (xls_urls.yml / reward.yml / pharmacy.json in the working directory,
    10 geocode attempts with 10 second linear backoff).
    """
    if env is None:
        env = os.environ
    return RetrieverConfig(
        sources_path=Path(env.get("PHARMACY_SOURCES") or DEFAULT_SOURCES_PATH),
        reward_path=Path(env.get("PHARMACY_REWARDS") or DEFAULT_REWARD_PATH),
        output_path=Path(env.get("PHARMACY_OUTPUT") or DEFAULT_OUTPUT_PATH),
        geocode_url=env.get("PHARMACY_GEOCODE_URL") or DEFAULT_GEOCODE_URL,
        geocode_retry=_env_int(env, "PHARMACY_GEOCODE_RETRY", DEFAULT_GEOCODE_RETRY),
        geocode_backoff=_env_float(env, "PHARMACY_GEOCODE_BACKOFF", DEFAULT_GEOCODE_BACKOFF),
        http_timeout=_env_float(env, "PHARMACY_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
    )
