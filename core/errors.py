"""Errors raised by the config service."""

from pathlib import Path
from typing import List


class ConfigError(Exception):
    """Base class for config service failures."""


class ConfigReadError(ConfigError):
    """An existing config file could not be parsed, so it must not be rewritten."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Cannot read {path}: {message}")
        self.path = path


class ConfigValidationError(ConfigError):
    """A mutated document failed schema validation and was not written."""

    def __init__(self, path: Path, schema_key: str, errors: List[str]):
        super().__init__(f"Validation failed for {path} ({schema_key}): {'; '.join(errors)}")
        self.path = path
        self.schema_key = schema_key
        self.errors = errors
