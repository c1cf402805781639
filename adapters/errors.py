"""Typed errors raised by platform adapters."""

from pathlib import Path
from typing import Union

from models.enums import ConfigScope


class AdapterError(Exception):
    """Base class for adapter failures. The message is prefixed with the agent name."""

    def __init__(self, agent_name: str, message: str):
        super().__init__(f"{agent_name}: {message}")
        self.agent_name = agent_name
        self.detail = message


class AdapterConfigError(AdapterError):
    """A config file exists but its content cannot be used."""


class AdapterFileNotFoundError(AdapterError):
    """A file the operation depends on does not exist."""

    def __init__(self, agent_name: str, file_path: Union[str, Path]):
        super().__init__(agent_name, f"file not found: {file_path}")
        self.file_path = Path(file_path)


class AdapterScopeError(AdapterError):
    """The platform has no concept of the requested thing in this scope."""

    def __init__(self, agent_name: str, scope: ConfigScope, operation: str):
        scope_value = scope.value if isinstance(scope, ConfigScope) else str(scope)
        super().__init__(agent_name, f'scope "{scope_value}" is not supported for {operation}')
        self.scope = scope
        self.operation = operation
