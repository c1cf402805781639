"""Enumerations shared by the tool model, adapters and profiles."""

from enum import Enum
from typing import List


class ToolType(str, Enum):
    """Kinds of tool an agent platform loads from disk."""

    SKILL = "skill"
    MCP_SERVER = "mcp_server"
    HOOK = "hook"
    COMMAND = "command"


class ConfigScope(str, Enum):
    """Where a tool's configuration lives and who controls it."""

    USER = "user"
    PROJECT = "project"
    LOCAL = "local"
    MANAGED = "managed"


class ToolStatus(str, Enum):
    """Health and enablement of a tool as read from disk."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    WARNING = "warning"
    ERROR = "error"


# Highest precedence first
SCOPE_PRECEDENCE: List[ConfigScope] = [
    ConfigScope.MANAGED,
    ConfigScope.PROJECT,
    ConfigScope.LOCAL,
    ConfigScope.USER,
]

ALL_SCOPES: List[ConfigScope] = [
    ConfigScope.USER,
    ConfigScope.PROJECT,
    ConfigScope.LOCAL,
    ConfigScope.MANAGED,
]

ALL_TOOL_TYPES: List[ToolType] = [
    ToolType.SKILL,
    ToolType.MCP_SERVER,
    ToolType.HOOK,
    ToolType.COMMAND,
]
