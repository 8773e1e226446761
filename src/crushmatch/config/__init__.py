"""Application configuration helpers."""

from __future__ import annotations

from .engine import EngineConfig, ReportConfig, get_engine_config, get_report_config
from .env import env_flag, env_int
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "EngineConfig",
    "ReportConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_int",
    "get_database_config",
    "get_database_uri",
    "get_engine_config",
    "get_report_config",
    "get_storage_config",
]
