"""Root logger setup for the command line entry point."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

# alembic reports every migration step at INFO on each startup
_CHATTY_LOGGERS = ("alembic.runtime.migration",)


def _level_from_env() -> int:
    raw = os.getenv("CRUSHMATCH_LOG_LEVEL", "").strip().upper()
    if not raw:
        return logging.INFO
    level = logging.getLevelNamesMapping().get(raw)
    if level is None:
        raise ConfigurationError(
            f"CRUSHMATCH_LOG_LEVEL must be a logging level name, got {raw!r}",
            variable="CRUSHMATCH_LOG_LEVEL",
        )
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    ``level`` defaults to ``CRUSHMATCH_LOG_LEVEL`` (INFO when unset). Pass
    ``force=True`` to replace handlers that are already installed.
    """

    effective = _level_from_env() if level is None else level
    logging.basicConfig(
        level=effective,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if effective > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
