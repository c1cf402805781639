"""Platform adapter contract.

An adapter knows one agent platform's file layout, formats and
enable/disable encodings, and turns them into ``NormalizedTool`` records.
Adapters never write files themselves: every mutation goes through the
injected ``ConfigWriter`` (the config service), which takes backups and
validates before anything touches disk.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Type

from pydantic import BaseModel

from adapters.errors import AdapterError, AdapterScopeError
from adapters.markdown_tools import SKILL_MANIFEST
from core.file_io import ConfigReadResult, FileIO
from core.schema_registry import ValidationResult
from models.bundle import ExportedFile
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import HookMetadata, McpServerMetadata, NormalizedTool, ToolSource
from utils.constants import DISABLED_SUFFIX
from utils.tool_key import canonical_key

logger = logging.getLogger(__name__)


class ConfigWriter(Protocol):
    """The slice of the config service an adapter is allowed to use."""

    def read_config_file(self, path: Path, schema_key: str) -> ConfigReadResult:
        ...

    def validate(self, schema_key: str, data: Any) -> ValidationResult:
        ...

    def write_config_file(self, path: Path, schema_key: str, mutate: Callable[[Any], Any]) -> Any:
        ...

    def write_text_file(self, path: Path, content: str) -> None:
        ...

    def rename_path(self, source: Path, target: Path) -> None:
        ...

    def remove_path(self, path: Path) -> None:
        ...

    def copy_path(self, source: Path, target: Path) -> None:
        ...


_ERROR_LABELS = {
    ToolType.MCP_SERVER: "MCP",
    ToolType.SKILL: "Skill",
    ToolType.HOOK: "Hook",
    ToolType.COMMAND: "Command",
}


def make_error_tool(tool_type: ToolType, scope: ConfigScope, file_path: Path, detail: str) -> NormalizedTool:
    """Build the placeholder entry that stands in for an unreadable config file."""
    label = _ERROR_LABELS[tool_type]
    return NormalizedTool(
        id=f"{tool_type.value}:{scope.value}:error:{file_path}",
        type=tool_type,
        name=f"{label} Config Error",
        scope=scope,
        status=ToolStatus.ERROR,
        status_detail=detail,
        source=ToolSource(file_path=file_path),
    )


def strip_disabled_suffix(name: str) -> str:
    if name.endswith(DISABLED_SUFFIX):
        return name[: -len(DISABLED_SUFFIX)]
    return name


def has_disabled_suffix(path: Path) -> bool:
    return path.name.endswith(DISABLED_SUFFIX)


class PlatformAdapter(ABC):
    """Base class for per-platform adapters."""

    id: str = ""
    display_name: str = ""
    supported_tool_types: Sequence[ToolType] = ()
    supported_scopes: Sequence[ConfigScope] = ()
    # Set for platforms whose skills are single files rather than SKILL.md directories
    skill_file_suffix: Optional[str] = None
    command_file_suffix: str = ".md"

    def __init__(
        self,
        config: ConfigWriter,
        file_io: Optional[FileIO] = None,
        home: Optional[Path] = None,
        workspace_root: Optional[Path] = None,
    ):
        self.config = config
        self.file_io = file_io or FileIO()
        self.home = Path(home) if home else Path.home()
        self.workspace_root = Path(workspace_root) if workspace_root else None

    # ------------------------------------------------------------------
    # Workspace handling
    # ------------------------------------------------------------------

    def set_workspace_root(self, workspace_root: Optional[Path]) -> None:
        self.workspace_root = Path(workspace_root) if workspace_root else None

    @staticmethod
    def requires_workspace(scope: ConfigScope) -> bool:
        return scope in (ConfigScope.PROJECT, ConfigScope.LOCAL)

    def _require_root(self, scope: ConfigScope) -> Path:
        if self.workspace_root is None:
            raise AdapterError(self.display_name, f"{scope.value} scope requires an open workspace")
        return self.workspace_root

    def _check_writable(self, scope: ConfigScope, operation: str) -> None:
        if scope == ConfigScope.MANAGED or scope not in self.supported_scopes:
            raise AdapterScopeError(self.display_name, scope, operation)
        if self.requires_workspace(scope):
            self._require_root(scope)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_tools(self, tool_type: ToolType, scope: ConfigScope) -> List[NormalizedTool]:
        """
        Read every tool of ``tool_type`` defined in ``scope``.

        Unsupported combinations and workspace scopes without an open
        workspace return an empty list.
        """
        if tool_type not in self.supported_tool_types or scope not in self.supported_scopes:
            return []
        if self.requires_workspace(scope) and self.workspace_root is None:
            return []

        readers = {
            ToolType.MCP_SERVER: self._read_mcp_servers,
            ToolType.SKILL: self._read_skills,
            ToolType.HOOK: self._read_hooks,
            ToolType.COMMAND: self._read_commands,
        }
        try:
            return readers[tool_type](scope)
        except AdapterScopeError as e:
            logger.debug(f"{self.id}: {e}")
            return []

    @abstractmethod
    def _read_mcp_servers(self, scope: ConfigScope) -> List[NormalizedTool]:
        ...

    @abstractmethod
    def _read_skills(self, scope: ConfigScope) -> List[NormalizedTool]:
        ...

    def _read_hooks(self, scope: ConfigScope) -> List[NormalizedTool]:
        return []

    @abstractmethod
    def _read_commands(self, scope: ConfigScope) -> List[NormalizedTool]:
        ...

    def find_current(self, tool: NormalizedTool) -> Optional[NormalizedTool]:
        """Re-read the tool's scope and return the live record with the same identity."""
        key = canonical_key(tool)
        candidates = [t for t in self.read_tools(tool.type, tool.scope)
                      if t.status != ToolStatus.ERROR and canonical_key(t) == key]
        if not candidates:
            return None
        if tool.type == ToolType.HOOK and isinstance(tool.metadata, HookMetadata):
            for candidate in candidates:
                meta = candidate.metadata
                if meta.stashed == tool.metadata.stashed and meta.index == tool.metadata.index:
                    return candidate
        return candidates[0]

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    def _current_enabled(self, tool: NormalizedTool) -> bool:
        if tool.status == ToolStatus.ERROR:
            raise AdapterError(self.display_name, f"cannot toggle '{tool.name}': {tool.status_detail}")
        if tool.status == ToolStatus.WARNING:
            path = tool.source.directory_path if tool.source.is_directory else tool.source.file_path
            return not has_disabled_suffix(path)
        return tool.status == ToolStatus.ENABLED

    def _resolve_live(self, tool: NormalizedTool, operation: str) -> NormalizedTool:
        self._check_writable(tool.scope, operation)
        current = self.find_current(tool)
        if current is None:
            raise AdapterError(self.display_name, f"{tool.type.value} '{tool.name}' no longer exists")
        return current

    def toggle_tool(self, tool: NormalizedTool) -> None:
        """Flip the tool's enabled state as it is on disk right now."""
        current = self._resolve_live(tool, "toggle_tool")
        self._set_enabled(current, not self._current_enabled(current))

    def set_tool_enabled(self, tool: NormalizedTool, enabled: bool) -> bool:
        """
        Bring the tool to ``enabled`` using whatever encoding its source uses.

        Returns:
            True if a mutation was made, False if the tool already had that state
        """
        current = self._resolve_live(tool, "set_tool_enabled")
        if self._current_enabled(current) == enabled:
            logger.debug(f"{self.id}: {tool.id} already {'enabled' if enabled else 'disabled'}")
            return False
        self._set_enabled(current, enabled)
        return True

    def _set_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        if tool.type == ToolType.MCP_SERVER:
            self._set_mcp_server_enabled(tool, enabled)
        elif tool.type == ToolType.HOOK:
            self._set_hook_enabled(tool, enabled)
        else:
            self._set_suffix_enabled(tool, enabled)

    @abstractmethod
    def _set_mcp_server_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        ...

    def _set_hook_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        raise AdapterScopeError(self.display_name, tool.scope, "hooks")

    def _set_suffix_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        path = tool.source.directory_path if tool.source.is_directory else tool.source.file_path
        if enabled and has_disabled_suffix(path):
            self.config.rename_path(path, path.with_name(strip_disabled_suffix(path.name)))
        elif not enabled and not has_disabled_suffix(path):
            self.config.rename_path(path, path.with_name(path.name + DISABLED_SUFFIX))

    # ------------------------------------------------------------------
    # Writing, removing, installing
    # ------------------------------------------------------------------

    def write_tool(self, tool: NormalizedTool, scope: ConfigScope) -> None:
        """Write a copy of ``tool`` into ``scope``, keeping its enabled state."""
        self._check_writable(scope, "write_tool")
        enabled = tool.is_enabled or tool.status == ToolStatus.WARNING

        if tool.type == ToolType.MCP_SERVER:
            metadata = tool.metadata if isinstance(tool.metadata, McpServerMetadata) else McpServerMetadata()
            self.install_mcp_server(scope, tool.name, metadata, enabled=enabled)
        elif tool.type == ToolType.HOOK:
            if not isinstance(tool.metadata, HookMetadata):
                raise AdapterError(self.display_name, f"hook '{tool.name}' has no definition")
            group = {"matcher": tool.metadata.matcher, "hooks": tool.metadata.hooks}
            group.update(tool.metadata.extra)
            self.install_hook(scope, tool.metadata.event_name, group, enabled=enabled)
        elif tool.type == ToolType.SKILL:
            source = tool.source.directory_path if tool.source.is_directory else tool.source.file_path
            self.config.copy_path(source, self.get_skills_dir(scope) / source.name)
        else:
            source = tool.source.file_path
            target = self._command_target(scope, tool.name, source.name)
            self.config.copy_path(source, target)

    def remove_tool(self, tool: NormalizedTool) -> None:
        """Delete the tool from its source."""
        self._check_writable(tool.scope, "remove_tool")
        if tool.type == ToolType.MCP_SERVER:
            self._remove_mcp_server(tool)
        elif tool.type == ToolType.HOOK:
            self._remove_hook(tool)
        elif tool.source.is_directory and tool.source.directory_path:
            self.config.remove_path(tool.source.directory_path)
        else:
            self.config.remove_path(tool.source.file_path)

    @abstractmethod
    def _remove_mcp_server(self, tool: NormalizedTool) -> None:
        ...

    def _remove_hook(self, tool: NormalizedTool) -> None:
        raise AdapterScopeError(self.display_name, tool.scope, "hooks")

    @abstractmethod
    def install_mcp_server(
        self, scope: ConfigScope, name: str, server: McpServerMetadata, enabled: bool = True
    ) -> None:
        ...

    def install_hook(self, scope: ConfigScope, event_name: str, group: Dict[str, Any], enabled: bool = True) -> None:
        raise AdapterScopeError(self.display_name, scope, "install_hook")

    def install_skill(self, scope: ConfigScope, name: str, files: List[ExportedFile]) -> None:
        """Write a skill directory from embedded files."""
        self._check_writable(scope, "install_skill")
        skill_dir = self.get_skills_dir(scope) / name
        for exported in files:
            self.config.write_text_file(safe_join(skill_dir, exported.name), exported.content)
        logger.info(f"{self.id}: installed skill '{name}' into {scope.value} scope")

    def install_command(self, scope: ConfigScope, name: str, files: List[ExportedFile]) -> None:
        """Write a command's files, nesting colon-separated names into subdirectories."""
        self._check_writable(scope, "install_command")
        for exported in files:
            self.config.write_text_file(self._command_target(scope, name, exported.name), exported.content)
        logger.info(f"{self.id}: installed command '{name}' into {scope.value} scope")

    def _command_target(self, scope: ConfigScope, name: str, file_name: str) -> Path:
        parts = name.split(":")[:-1]
        return safe_join(self.get_commands_dir(scope), "/".join(parts + [file_name]))

    def adapt_exported_files(self, tool_type: ToolType, name: str, files: List[ExportedFile]) -> List[ExportedFile]:
        """
        Rename embedded skill or command files to this platform's layout.

        Used when a bundle made for another agent is installed here. Files
        already in the right shape are returned unchanged.
        """
        if tool_type == ToolType.COMMAND:
            if len(files) != 1:
                return list(files)
            leaf = name.split(":")[-1]
            return [ExportedFile(name=f"{leaf}{self.command_file_suffix}", content=files[0].content)]

        if tool_type != ToolType.SKILL:
            return list(files)

        main = next((f for f in files if f.name == SKILL_MANIFEST), None)
        if main is None:
            main = next((f for f in files if f.name.endswith(".md")), None)
        if main is None:
            return list(files)
        if self.skill_file_suffix:
            return [ExportedFile(name=f"{name}{self.skill_file_suffix}", content=main.content)]
        if main.name == SKILL_MANIFEST:
            return list(files)
        return [ExportedFile(name=SKILL_MANIFEST, content=main.content)]

    # ------------------------------------------------------------------
    # Paths and discovery
    # ------------------------------------------------------------------

    @abstractmethod
    def get_watch_paths(self, scope: ConfigScope) -> List[Path]:
        ...

    @abstractmethod
    def detect(self) -> bool:
        ...

    @abstractmethod
    def get_mcp_file_path(self, scope: ConfigScope) -> Path:
        ...

    @abstractmethod
    def get_mcp_schema_key(self, scope: ConfigScope) -> str:
        ...

    @abstractmethod
    def get_skills_dir(self, scope: ConfigScope) -> Path:
        ...

    @abstractmethod
    def get_commands_dir(self, scope: ConfigScope) -> Path:
        ...

    def get_settings_path(self, scope: ConfigScope) -> Path:
        raise AdapterScopeError(self.display_name, scope, "get_settings_path")

    @classmethod
    @abstractmethod
    def get_schemas(cls) -> Dict[str, Type[BaseModel]]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} workspace={self.workspace_root}>"


def safe_join(root: Path, relative: str) -> Path:
    """Join a bundle-supplied relative path under ``root``, refusing escapes."""
    candidate = (root / relative).resolve()
    if candidate != root.resolve() and root.resolve() not in candidate.parents:
        raise ValueError(f"Refusing to write outside {root}: {relative}")
    return root / relative
