"""
Application configuration.

Load order (each layer overrides the previous):
  1. ``config/default.toml``: committed defaults
  2. ``config/local.toml``: optional local overrides (gitignored)
  3. ``.env``: local env overrides (gitignored)
  4. Environment variables: ``FINAI_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from finai.domain import MEDIUM, RISK_TIERS


class StorageConfig(BaseModel):
    """Local key-value store location and namespaces."""

    model_config = ConfigDict(frozen=True)

    path: str = "data/finai_store.json"
    finance_key: str = "finai-finance"
    users_key: str = "finai-users"
    auth_key: str = "finai-auth"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AdvisorConfig(BaseModel):
    """Starting values of the investment advisor form."""

    model_config = ConfigDict(frozen=True)

    default_age: int = 30
    default_risk: str = MEDIUM
    default_goals: list[str] = ["wealth-creation"]

    @field_validator("default_risk")
    @classmethod
    def validate_risk(cls, v: str) -> str:
        if v not in RISK_TIERS:
            raise ValueError(f"default_risk must be one of {list(RISK_TIERS)}, got '{v}'.")
        return v

    @field_validator("default_age")
    @classmethod
    def validate_age(cls, v: int) -> int:
        if not 18 <= v <= 90:
            raise ValueError(f"default_age must be in [18, 90], got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(frozen=True)

    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()
    advisor: AdvisorConfig = AdvisorConfig()
    debug: bool = False


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return Path(__file__).parent.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``; when that default file is
            absent the built-in defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = root / "config" / "default.toml"
        if default_path.exists():
            config_path = default_path
    elif not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is not None:
        config_path = Path(config_path)
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)

        local_config_path = config_path.parent / "local.toml"
        if local_config_path.exists():
            with open(local_config_path, "rb") as f:
                raw = _deep_merge(raw, tomllib.load(f))

    raw = _apply_env_overrides(raw)

    return AppConfig(
        storage=StorageConfig(**raw.get("storage", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        advisor=AdvisorConfig(**raw.get("advisor", {})),
        debug=raw.get("debug", False),
    )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply FINAI_* env vars to the raw config dict.

    Supported overrides:
      FINAI_STORE_PATH  → raw["storage"]["path"]
      FINAI_LOG_LEVEL   → raw["logging"]["level"]
      FINAI_DEBUG       → raw["debug"]
    """
    if store_path := os.environ.get("FINAI_STORE_PATH"):
        raw.setdefault("storage", {})["path"] = store_path

    if log_level := os.environ.get("FINAI_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("FINAI_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw
