from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from crushmatch.config import (
    ConfigurationError,
    configure_logging,
    get_database_config,
    get_storage_config,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def clear_database_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.delenv("CRUSHMATCH_SQL_ECHO", raising=False)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("alembic.runtime.migration").setLevel(logging.NOTSET)


def test_storage_config_uses_data_dir_override(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("CRUSHMATCH_DATA_DIR", str(tmp_path / "data"))

    config = get_storage_config()
    database = get_database_config(storage=config)

    expected = (tmp_path / "data" / "crushmatch.db").resolve()
    assert database.uri == f"sqlite+pysqlite:///{expected}"
    assert database.is_sqlite
    assert database.echo is False
    assert (tmp_path / "data").is_dir()


def test_database_uri_override_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/crushmatch")
    monkeypatch.setenv("CRUSHMATCH_SQL_ECHO", "yes")

    database = get_database_config()

    assert database.uri == "postgresql+psycopg://db/crushmatch"
    assert database.echo is True
    assert not database.is_sqlite


def test_invalid_echo_flag_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("CRUSHMATCH_SQL_ECHO", "sometimes")

    with pytest.raises(ConfigurationError) as excinfo:
        get_database_config()

    assert excinfo.value.variable == "CRUSHMATCH_SQL_ECHO"


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_reads_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRUSHMATCH_LOG_LEVEL", "warning")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("alembic.runtime.migration").level == logging.WARNING


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_rejects_unknown_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRUSHMATCH_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError, match="CRUSHMATCH_LOG_LEVEL"):
        configure_logging(force=True)
