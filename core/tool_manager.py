"""Single-tool actions: toggle, enable/disable, delete and move between scopes."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from adapters.base import PlatformAdapter
from core.adapter_registry import AdapterRegistry
from core.config_manager import ConfigManager
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import HookMetadata, NormalizedTool
from utils.constants import ERROR_MESSAGES

logger = logging.getLogger(__name__)

ACTION_TOGGLE = "toggle"
ACTION_DELETE = "delete"
ACTION_MOVE = "move"

_MOVABLE_SCOPES = (ConfigScope.USER, ConfigScope.PROJECT)


@dataclass
class ToolManagerResult:
    """Outcome of a single-tool action."""

    success: bool
    error: Optional[str] = None
    changed: bool = False


def get_available_actions(tool: NormalizedTool) -> List[str]:
    """Managed tools allow nothing; broken tools can only be deleted."""
    if tool.is_managed:
        return []
    if tool.status == ToolStatus.ERROR:
        return [ACTION_DELETE]
    return [ACTION_TOGGLE, ACTION_DELETE, ACTION_MOVE]


def get_move_targets(tool: NormalizedTool, adapter: Optional[PlatformAdapter] = None) -> List[ConfigScope]:
    if tool.is_managed:
        return []
    supported = adapter.supported_scopes if adapter is not None else _MOVABLE_SCOPES
    return [scope for scope in _MOVABLE_SCOPES if scope != tool.scope and scope in supported]


def describe_deletion(tool: NormalizedTool) -> str:
    """Human-readable summary for a delete confirmation prompt."""
    if tool.type == ToolType.SKILL:
        return f"Delete skill '{tool.name}' ({tool.source.directory_path or tool.source.file_path})"
    if tool.type == ToolType.COMMAND:
        return f"Delete command '{tool.name}' ({tool.source.file_path})"
    if tool.type == ToolType.MCP_SERVER:
        return f"Remove MCP server '{tool.name}' from {tool.source.file_path}"
    event = tool.metadata.event_name if isinstance(tool.metadata, HookMetadata) else "unknown"
    return f"Remove hook '{tool.name or event}' from {tool.source.file_path}"


class ToolManager:
    """
    Translates single-tool intents into adapter calls.

    Every adapter failure is converted into a ToolManagerResult; nothing
    propagates to the caller.
    """

    def __init__(self, config: ConfigManager, registry: AdapterRegistry):
        self.config = config
        self.registry = registry

    def _adapter(self) -> PlatformAdapter:
        adapter = self.registry.get_active_adapter()
        if adapter is None:
            raise RuntimeError(ERROR_MESSAGES["NO_ACTIVE_AGENT"])
        return adapter

    def toggle_tool(self, tool: NormalizedTool) -> ToolManagerResult:
        """Flip a tool's state as it currently is on disk."""
        if tool.is_managed:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["MANAGED_READ_ONLY"])

        try:
            self._adapter().toggle_tool(tool)
            logger.info(f"Toggled {tool.id}")
            return ToolManagerResult(success=True, changed=True)
        except Exception as e:
            error_msg = f"Failed to toggle {tool.name}: {e}"
            logger.error(error_msg)
            return ToolManagerResult(success=False, error=str(e))

    def set_tool_enabled(self, tool: NormalizedTool, enabled: bool) -> ToolManagerResult:
        """
        Bring a tool to the given state.

        Returns:
            ToolManagerResult whose ``changed`` is False when the tool already
            had that state
        """
        if tool.is_managed:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["MANAGED_READ_ONLY"])

        try:
            changed = self._adapter().set_tool_enabled(tool, enabled)
            return ToolManagerResult(success=True, changed=changed)
        except Exception as e:
            logger.error(f"Failed to {'enable' if enabled else 'disable'} {tool.name}: {e}")
            return ToolManagerResult(success=False, error=str(e))

    def delete_tool(self, tool: NormalizedTool) -> ToolManagerResult:
        if tool.is_managed:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["MANAGED_READ_ONLY"])

        try:
            self._adapter().remove_tool(tool)
            logger.info(f"Deleted {tool.id}")
            return ToolManagerResult(success=True, changed=True)
        except Exception as e:
            logger.error(f"Failed to delete {tool.name}: {e}")
            return ToolManagerResult(success=False, error=str(e))

    def move_tool(self, tool: NormalizedTool, target_scope: ConfigScope) -> ToolManagerResult:
        """
        Move a tool to another scope.

        The copy is written to the target before the source is removed, so a
        failure half way leaves a duplicate rather than losing the tool.
        """
        if tool.is_managed:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["MANAGED_READ_ONLY"])
        if target_scope == tool.scope:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["SAME_SCOPE"].format(scope=tool.scope.value))
        if target_scope == ConfigScope.MANAGED:
            return ToolManagerResult(success=False, error=ERROR_MESSAGES["MOVE_TO_MANAGED"])

        try:
            adapter = self._adapter()
            adapter.write_tool(tool, target_scope)
            adapter.remove_tool(tool)
            logger.info(f"Moved {tool.id} to {target_scope.value} scope")
            return ToolManagerResult(success=True, changed=True)
        except Exception as e:
            logger.error(f"Failed to move {tool.name} to {target_scope.value}: {e}")
            return ToolManagerResult(success=False, error=str(e))

    def check_conflict(self, tool: NormalizedTool, target_scope: ConfigScope) -> bool:
        """True when a tool of the same type and name already exists in ``target_scope``."""
        try:
            existing = self.config.read_tools_by_scope(tool.type, target_scope)
        except Exception as e:
            logger.warning(f"Could not read {target_scope.value} scope for conflicts: {e}")
            return False
        return any(t.name == tool.name and t.status != ToolStatus.ERROR for t in existing)
