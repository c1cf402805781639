"""Named structural validators used before a config document is trusted or written.

Schemas are pydantic models registered under a string key. Every model is
expected to allow extra fields so that validation never strips data the
application does not understand; the validated document itself, not the
model dump, is what gets persisted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    success: bool
    errors: List[str] = field(default_factory=list)


def format_validation_errors(exc: ValidationError) -> List[str]:
    """Render pydantic errors as ``path: message`` strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        messages.append(f"{location}: {error.get('msg', 'invalid value')}")
    return messages


class SchemaRegistry:
    """Registry of pydantic models keyed by schema name."""

    def __init__(self):
        self._schemas: Dict[str, Type[BaseModel]] = {}

    def register_schema(self, key: str, model: Type[BaseModel]) -> None:
        if key in self._schemas and self._schemas[key] is not model:
            logger.debug(f"Schema '{key}' replaced")
        self._schemas[key] = model

    def register_schemas(self, schemas: Dict[str, Type[BaseModel]]) -> None:
        for key, model in schemas.items():
            self.register_schema(key, model)

    def has_schema(self, key: str) -> bool:
        return key in self._schemas

    def get_schema(self, key: str) -> Type[BaseModel]:
        """
        Look up a schema.

        Raises:
            KeyError: If no schema is registered under ``key``
        """
        try:
            return self._schemas[key]
        except KeyError:
            raise KeyError(f"No schema registered for key '{key}'") from None

    def validate(self, key: str, data: Any) -> ValidationResult:
        """
        Validate ``data`` against the schema registered under ``key``.

        An unknown key is a programming error and raises KeyError.
        """
        model = self.get_schema(key)
        try:
            model.model_validate(data)
        except ValidationError as e:
            errors = format_validation_errors(e)
            logger.debug(f"Validation against '{key}' failed: {errors}")
            return ValidationResult(success=False, errors=errors)
        return ValidationResult(success=True)
