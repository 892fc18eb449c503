"""Dashboard service configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: OPSDASH_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class BackendConfig:
    base_url: str = "http://localhost:5116"
    timeout_seconds: float = 60.0
    long_timeout_seconds: float = 300.0  # bulk imports
    retry_delay_seconds: float = 2.0


@dataclass
class StorageConfig:
    state_dir: str = "data/state"


@dataclass
class ViewsConfig:
    pivot_page_size: int = 16
    default_page_size: int = 10
    fleet_top_n: int = 10


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    views: ViewsConfig = field(default_factory=ViewsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = ("server", "backend", "storage", "views", "logging")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "OPSDASH_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "OPSDASH_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "OPSDASH_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "OPSDASH_BACKEND_BASE_URL": lambda v: setattr(config.backend, "base_url", v),
        "OPSDASH_BACKEND_TIMEOUT": lambda v: setattr(config.backend, "timeout_seconds", float(v)),
        "OPSDASH_BACKEND_LONG_TIMEOUT": lambda v: setattr(config.backend, "long_timeout_seconds", float(v)),
        "OPSDASH_BACKEND_RETRY_DELAY": lambda v: setattr(config.backend, "retry_delay_seconds", float(v)),
        "OPSDASH_STORAGE_STATE_DIR": lambda v: setattr(config.storage, "state_dir", v),
        "OPSDASH_VIEWS_PIVOT_PAGE_SIZE": lambda v: setattr(config.views, "pivot_page_size", int(v)),
        "OPSDASH_VIEWS_DEFAULT_PAGE_SIZE": lambda v: setattr(config.views, "default_page_size", int(v)),
        "OPSDASH_VIEWS_FLEET_TOP_N": lambda v: setattr(config.views, "fleet_top_n", int(v)),
        "OPSDASH_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "OPSDASH_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path(os.environ.get("OPSDASH_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for name in _SECTIONS:
            section = getattr(config, name)
            for k, v in (raw.get(name) or {}).items():
                if hasattr(section, k):
                    setattr(section, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
