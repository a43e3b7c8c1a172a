from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..services.checkpoint import DEFAULT_CHECKPOINT_PATH
from ..tms.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/sync.yml``)
- Validate it against the bundled ``config_schema.json``
- Apply defaults
- Overlay secrets from the environment (``TMS_API_TOKEN``, ``TMS_PROJECT_ID``,
  ``TMS_BASE_URL``); the CLI loads ``.env`` into the environment first

The result is a frozen SyncConfig read once per run.
"""

__all__ = [
    "ConfigError",
    "RateLimitConfig",
    "SyncConfig",
    "load_config",
    "require_credentials",
    "DEFAULT_CONFIG_PATH",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/sync.yml")

ENV_TOKEN = "TMS_API_TOKEN"
ENV_PROJECT_ID = "TMS_PROJECT_ID"
ENV_BASE_URL = "TMS_BASE_URL"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RateLimitConfig:
    item_delay: float = 0.2  # seconds after each request
    group_delay: float = 1.0  # seconds after each group
    group_every: int = 50  # push: extra group pause every N items (0 = off)


@dataclass(frozen=True)
class SyncConfig:
    project_id: int | None
    api_token: str | None
    base_url: str = DEFAULT_BASE_URL
    workbook: str | None = None
    source_marker: str = "English"
    branch_id: int | None = None
    page_size: int = 500
    request_timeout: float = DEFAULT_TIMEOUT
    max_seconds: float | None = None
    checkpoint_path: str = str(DEFAULT_CHECKPOINT_PATH)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    locale_overrides: dict[str, str] = field(default_factory=dict)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing/invalid or the data fails
            validation (unknown keys, wrong types ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_project_id(raw: Any) -> int | None:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if not text.isdigit():
        raise ConfigError(f"project_id must be numeric, got {raw!r}")
    return int(text)


def load_config(path: Path, env: Mapping[str, str] | None = None) -> SyncConfig:
    if env is None:
        env = os.environ
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    # environment wins over the file for secrets
    token = env.get(ENV_TOKEN) or data.get("api_token")
    project_id = _parse_project_id(env.get(ENV_PROJECT_ID) or data.get("project_id"))
    base_url = env.get(ENV_BASE_URL) or data.get("base_url", DEFAULT_BASE_URL)

    rl_raw = data.get("rate_limit") or {}
    defaults = RateLimitConfig()
    rate_limit = RateLimitConfig(
        item_delay=float(rl_raw.get("item_delay", defaults.item_delay)),
        group_delay=float(rl_raw.get("group_delay", defaults.group_delay)),
        group_every=int(rl_raw.get("group_every", defaults.group_every)),
    )
    return SyncConfig(
        project_id=project_id,
        api_token=token.strip() if isinstance(token, str) and token.strip() else None,
        base_url=base_url,
        workbook=data.get("workbook"),
        source_marker=data.get("source_marker", "English"),
        branch_id=data.get("branch_id") or None,
        page_size=int(data.get("page_size", 500)),
        request_timeout=float(data.get("request_timeout", DEFAULT_TIMEOUT)),
        max_seconds=data.get("max_seconds"),
        checkpoint_path=data.get("checkpoint_path", str(DEFAULT_CHECKPOINT_PATH)),
        rate_limit=rate_limit,
        locale_overrides=dict(data.get("locale_overrides") or {}),
    )


def require_credentials(cfg: SyncConfig) -> tuple[int, str]:
    """Return (project_id, token) or raise ConfigError before any request."""
    if not cfg.api_token:
        raise ConfigError(f"API token is not set (config api_token or {ENV_TOKEN})")
    if cfg.project_id is None:
        raise ConfigError(f"project id is not set (config project_id or {ENV_PROJECT_ID})")
    return cfg.project_id, cfg.api_token
