"""Configuration loader for Badge Insights using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (INSIGHTS_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("INSIGHTS_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "INSIGHTS_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ExtractionSettings(BaseSettings):
    """Address extraction limits."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_EXTRACTION__")

    max_depth: int = Field(default=64, ge=1)


class VerifierSettings(BaseSettings):
    """Remote ownership verification endpoint."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_VERIFIER__")

    endpoint_url: str = "https://api.bitbadges.io/api/v0/verifyOwnershipRequirements"
    timeout_sec: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=8, ge=1)
    max_retries: int = Field(default=1, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0)


class UISettings(BaseSettings):
    """Links rendered into the insight panel."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_UI__")

    portfolio_url_template: str = "https://bitbadges.io/account/{address}"
    settings_url: str = "https://bitbadges.io/snap"


class StoreSettings(BaseSettings):
    """Persistent rule store configuration."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_STORE__")

    backend: str = "sqlite"  # sqlite | memory
    sqlite_path: str = "data/snap_state.db"


class APISettings(BaseSettings):
    """HTTP bridge configuration."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_API__")

    host: str = "0.0.0.0"
    port: int = 8200
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root Badge Insights settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="INSIGHTS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False

    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    verifier: VerifierSettings = Field(default_factory=VerifierSettings)
    ui: UISettings = Field(default_factory=UISettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root."""
        if not Path(self.store.sqlite_path).is_absolute():
            self.store.sqlite_path = str(self.project_root / self.store.sqlite_path)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
