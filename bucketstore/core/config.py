"""
bucketstore Configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (BUCKETSTORE_*)
3. Project config (./bucketstore.toml)
4. User config (~/.bucketstore/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    BUCKETSTORE_ROOT → store.root
    BUCKETSTORE_CREATE_IF_MISSING → store.create_if_missing
    BUCKETSTORE_PROVIDER → backend.provider
    BUCKETSTORE_GCS_BUCKET → backend.gcs_bucket
    BUCKETSTORE_LOG_LEVEL → logging.console_level
    BUCKETSTORE_LOG_FILE_LEVEL → logging.file_level
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from bucketstore.core.errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class StoreConfig(BaseModel):
    """Datastore behavior configuration."""

    root: str = "/"
    create_if_missing: bool = False


class BackendConfig(BaseModel):
    """Object store client configuration."""

    provider: Literal["memory", "sqlite", "gcs"] = "sqlite"
    page_size: int = Field(default=1000, gt=0)
    sqlite_path: str = "~/.bucketstore/bucket.db"
    sqlite_bucket: str = "default"
    gcs_bucket: str = ""
    gcs_project: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration, applied by setup_logging_from_config."""

    dir: str = "~/.bucketstore/logs"
    console_level: str = "WARNING"
    file_level: str = "DEBUG"
    console_format: str = "[%(levelname)s] %(message)s"
    file_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @field_validator("console_level", "file_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}, expected one of {LOG_LEVELS}")
        return level


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class BucketStoreConfig(BaseModel):
    """Root configuration for bucketstore."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> BucketStoreConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.bucketstore/config.toml)
        user_config_path = user_path or get_home() / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./bucketstore.toml)
        project_config_path = project_path or Path.cwd() / "bucketstore.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return BucketStoreConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def get_log_dir(self) -> Path:
        return Path(self.logging.dir).expanduser()


def get_home() -> Path:
    """Get the bucketstore home directory (~/.bucketstore)."""
    return Path.home() / ".bucketstore"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from BUCKETSTORE_* environment variables."""
    result: dict[str, Any] = {}

    env_mapping = {
        "BUCKETSTORE_ROOT": ("store", "root"),
        "BUCKETSTORE_CREATE_IF_MISSING": ("store", "create_if_missing"),
        "BUCKETSTORE_PROVIDER": ("backend", "provider"),
        "BUCKETSTORE_PAGE_SIZE": ("backend", "page_size"),
        "BUCKETSTORE_SQLITE_PATH": ("backend", "sqlite_path"),
        "BUCKETSTORE_SQLITE_BUCKET": ("backend", "sqlite_bucket"),
        "BUCKETSTORE_GCS_BUCKET": ("backend", "gcs_bucket"),
        "BUCKETSTORE_GCS_PROJECT": ("backend", "gcs_project"),
        "BUCKETSTORE_LOG_DIR": ("logging", "dir"),
        "BUCKETSTORE_LOG_LEVEL": ("logging", "console_level"),
        "BUCKETSTORE_LOG_FILE_LEVEL": ("logging", "file_level"),
    }

    for env_var, (section, key) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result.setdefault(section, {})[key] = _convert_value(value)

    return result


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            for var_name in pattern.findall(value):
                value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
            data[key] = value
