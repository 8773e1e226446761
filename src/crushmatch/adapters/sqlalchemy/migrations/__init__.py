"""Alembic schema management for the SQLAlchemy adapter."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from crushmatch.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_DIR: Final[Path] = Path(__file__).resolve().parent
# only present in a source checkout; installed wheels run on defaults
PYPROJECT_PATH: Final[Path] = MIGRATIONS_DIR.parents[4] / "pyproject.toml"


def _pyproject_options() -> dict[str, str]:
    try:
        with PYPROJECT_PATH.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError:
        return {}
    section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def alembic_config(*, url: str | None = None) -> Config:
    """Config whose scripts are always this package's, whatever the working directory."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    for key, value in _pyproject_options().items():
        if key != "script_location":
            config.set_main_option(key, value)
    if url is not None:
        config.set_main_option("sqlalchemy.url", url)
    return config


def head_revision() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def current_revision(engine: Engine) -> str | None:
    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the database schema to the latest revision.

    With ``engine`` the migration runs on one of its connections, which keeps
    in-memory SQLite databases intact.
    """

    if engine is None:
        command.upgrade(alembic_config(url=database_uri or get_database_uri()), "head")
        return
    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
