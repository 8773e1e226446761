"""Database location settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag

APP_DIR_NAME: Final[str] = "crushmatch"
DEFAULT_DB_FILENAME: Final[str] = "crushmatch.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where the SQLite database lives when no explicit URI is configured."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_path(self, *, create: bool = True) -> Path:
        directory = self.data_dir.expanduser().resolve()
        if create:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / self.database_filename

    def sqlite_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")


def _default_data_dir() -> Path:
    if os.name == "nt":
        root = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(root) / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    override = os.getenv("CRUSHMATCH_DATA_DIR", "").strip()
    return StorageConfig(data_dir=Path(override) if override else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file under the data directory."""

    echo = env_flag("CRUSHMATCH_SQL_ECHO")
    uri = os.getenv("DATABASE_URI", "").strip()
    if uri:
        return DatabaseConfig(uri=uri, echo=echo)
    return DatabaseConfig(uri=(storage or get_storage_config()).sqlite_uri(), echo=echo)


def get_database_uri() -> str:
    return get_database_config().uri
