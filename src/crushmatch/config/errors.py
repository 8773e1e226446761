"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """An environment variable holds a value the engine cannot use."""

    def __init__(self, message: str, *, variable: str | None = None) -> None:
        super().__init__(message)
        self.variable = variable
