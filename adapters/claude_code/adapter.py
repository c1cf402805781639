"""Claude Code adapter.

Layout handled here:

- user:    ~/.claude/settings.json, ~/.claude.json, ~/.claude/skills, ~/.claude/commands
- project: .claude/settings.json, .mcp.json, .claude/skills, .claude/commands
- local:   .claude/settings.local.json (hooks only)
- managed: managed-settings.json and managed-mcp.json in the OS managed dir (read only)

MCP servers have two disable encodings: ``disabled: true`` on the entry and
the name listed in ``disabledMcpServers`` of the same scope's settings file.
Hooks are disabled by moving their matcher group into ``_disabledHooks``.
Skills and commands use the ``.disabled`` name suffix.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from adapters.base import ConfigWriter, PlatformAdapter, make_error_tool
from adapters.claude_code import parsers, paths, writers
from adapters.claude_code.schemas import CLAUDE_CODE_SCHEMAS
from adapters.errors import AdapterError, AdapterScopeError
from adapters.markdown_tools import parse_commands_dir, parse_skills_dir
from core.file_io import FileIO
from models.enums import ConfigScope, ToolType
from models.tool import HookMetadata, McpServerMetadata, NormalizedTool
from utils.platform_paths import get_managed_config_dir

logger = logging.getLogger(__name__)


class ClaudeCodeAdapter(PlatformAdapter):
    """Reads and writes Claude Code's JSON settings, MCP files and markdown tools."""

    id = "claude-code"
    display_name = "Claude Code"
    supported_tool_types = (ToolType.SKILL, ToolType.MCP_SERVER, ToolType.HOOK, ToolType.COMMAND)
    supported_scopes = (ConfigScope.USER, ConfigScope.PROJECT, ConfigScope.LOCAL, ConfigScope.MANAGED)

    def __init__(
        self,
        config: ConfigWriter,
        file_io: Optional[FileIO] = None,
        home: Optional[Path] = None,
        workspace_root: Optional[Path] = None,
        managed_dir: Optional[Path] = None,
    ):
        super().__init__(config, file_io=file_io, home=home, workspace_root=workspace_root)
        self.managed_dir = Path(managed_dir) if managed_dir else get_managed_config_dir(self.home)

    @classmethod
    def get_schemas(cls):
        return dict(CLAUDE_CODE_SCHEMAS)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def get_settings_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_settings_path(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_settings_path(self._require_root(scope))
        if scope == ConfigScope.LOCAL:
            return paths.project_local_settings_path(self._require_root(scope))
        return paths.managed_settings_path(self.managed_dir)

    def get_mcp_file_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.claude_json_path(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_mcp_path(self._require_root(scope))
        if scope == ConfigScope.MANAGED:
            return paths.managed_mcp_path(self.managed_dir)
        raise AdapterScopeError(self.display_name, scope, "get_mcp_file_path")

    def get_mcp_schema_key(self, scope: ConfigScope) -> str:
        if scope == ConfigScope.USER:
            return "claude-json"
        if scope in (ConfigScope.PROJECT, ConfigScope.MANAGED):
            return "mcp-file"
        raise AdapterScopeError(self.display_name, scope, "get_mcp_schema_key")

    def get_skills_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_skills_dir(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_skills_dir(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_skills_dir")

    def get_commands_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_commands_dir(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_commands_dir(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_commands_dir")

    def get_watch_paths(self, scope: ConfigScope) -> List[Path]:
        if scope == ConfigScope.USER:
            return [
                paths.user_settings_path(self.home),
                paths.claude_json_path(self.home),
                paths.user_skills_dir(self.home),
                paths.user_commands_dir(self.home),
            ]
        if scope == ConfigScope.MANAGED:
            return [paths.managed_settings_path(self.managed_dir), paths.managed_mcp_path(self.managed_dir)]
        if self.workspace_root is None:
            return []
        if scope == ConfigScope.PROJECT:
            root = self.workspace_root
            return [
                paths.project_settings_path(root),
                paths.project_local_settings_path(root),
                paths.project_mcp_path(root),
                paths.project_skills_dir(root),
                paths.project_commands_dir(root),
            ]
        return [paths.project_local_settings_path(self.workspace_root)]

    def detect(self) -> bool:
        return paths.claude_dir(self.home).is_dir() or paths.claude_json_path(self.home).is_file()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read_settings(self, scope: ConfigScope) -> Dict[str, Any]:
        """Settings document for ``scope``; empty when missing or unreadable."""
        result = self.config.read_config_file(self.get_settings_path(scope), "settings-file")
        return result.data if result.ok else {}

    def _read_mcp_servers(self, scope: ConfigScope) -> List[NormalizedTool]:
        file_path = self.get_mcp_file_path(scope)
        result = self.config.read_config_file(file_path, self.get_mcp_schema_key(scope))
        if result.not_found:
            return []
        if not result.ok:
            return [make_error_tool(ToolType.MCP_SERVER, scope, file_path, result.error)]

        disabled = parsers.read_disabled_mcp_servers(self._read_settings(scope))
        return parsers.parse_mcp_servers(result.data.get("mcpServers") or {}, scope, file_path, disabled)

    def _read_hooks(self, scope: ConfigScope) -> List[NormalizedTool]:
        file_path = self.get_settings_path(scope)
        result = self.config.read_config_file(file_path, "settings-file")
        if result.not_found:
            return []
        if not result.ok:
            return [make_error_tool(ToolType.HOOK, scope, file_path, result.error)]
        return parsers.parse_hooks(result.data, scope, file_path)

    def _validate_skill(self, data: Dict[str, Any]) -> List[str]:
        return self.config.validate("skill-frontmatter", data).errors

    def _validate_command(self, data: Dict[str, Any]) -> List[str]:
        return self.config.validate("command-frontmatter", data).errors

    def _read_skills(self, scope: ConfigScope) -> List[NormalizedTool]:
        return parse_skills_dir(self.get_skills_dir(scope), scope, self.file_io, self._validate_skill)

    def _read_commands(self, scope: ConfigScope) -> List[NormalizedTool]:
        return parse_commands_dir(
            self.get_commands_dir(scope), scope, self.file_io,
            validate_frontmatter=self._validate_command,
        )

    # ------------------------------------------------------------------
    # MCP servers
    # ------------------------------------------------------------------

    def _set_mcp_server_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        scope = tool.scope
        settings_path = self.get_settings_path(scope)
        mcp_path = tool.source.file_path
        schema_key = self.get_mcp_schema_key(scope)
        settings = self._read_settings(scope)

        if enabled:
            if tool.name in parsers.read_disabled_mcp_servers(settings):
                self.config.write_config_file(
                    settings_path, "settings-file",
                    lambda doc: writers.remove_from_disabled_list(doc, tool.name),
                )
            current = self.config.read_config_file(mcp_path, schema_key)
            entry = (current.data.get("mcpServers") or {}).get(tool.name) if current.ok else None
            if entry is not None and entry.get("disabled") is True:
                self.config.write_config_file(
                    mcp_path, schema_key,
                    lambda doc: writers.set_server_disabled_flag(doc, tool.name, False),
                )
        elif isinstance(settings.get("disabledMcpServers"), list):
            self.config.write_config_file(
                settings_path, "settings-file",
                lambda doc: writers.add_to_disabled_list(doc, tool.name),
            )
        else:
            self.config.write_config_file(
                mcp_path, schema_key,
                lambda doc: writers.set_server_disabled_flag(doc, tool.name, True),
            )
        logger.info(f"{self.id}: MCP server '{tool.name}' {'enabled' if enabled else 'disabled'} ({scope.value})")

    def _remove_mcp_server(self, tool: NormalizedTool) -> None:
        self.config.write_config_file(
            tool.source.file_path, self.get_mcp_schema_key(tool.scope),
            lambda doc: writers.delete_mcp_server(doc, tool.name),
        )
        if tool.name in parsers.read_disabled_mcp_servers(self._read_settings(tool.scope)):
            self.config.write_config_file(
                self.get_settings_path(tool.scope), "settings-file",
                lambda doc: writers.remove_from_disabled_list(doc, tool.name),
            )
        logger.info(f"{self.id}: removed MCP server '{tool.name}' ({tool.scope.value})")

    def install_mcp_server(
        self, scope: ConfigScope, name: str, server: McpServerMetadata, enabled: bool = True
    ) -> None:
        self._check_writable(scope, "install_mcp_server")
        entry = writers.build_server_entry(server, enabled=enabled)
        self.config.write_config_file(
            self.get_mcp_file_path(scope), self.get_mcp_schema_key(scope),
            lambda doc: writers.put_mcp_server(doc, name, entry),
        )
        if enabled and name in parsers.read_disabled_mcp_servers(self._read_settings(scope)):
            self.config.write_config_file(
                self.get_settings_path(scope), "settings-file",
                lambda doc: writers.remove_from_disabled_list(doc, name),
            )
        logger.info(f"{self.id}: installed MCP server '{name}' into {scope.value} scope")

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _hook_metadata(self, tool: NormalizedTool) -> HookMetadata:
        if not isinstance(tool.metadata, HookMetadata):
            raise AdapterError(self.display_name, f"hook '{tool.name}' has no event information")
        return tool.metadata

    def _set_hook_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        meta = self._hook_metadata(tool)
        if enabled and meta.stashed:
            action = writers.unstash_hook
        elif enabled:
            action = writers.clear_hook_disabled_flag
        else:
            action = writers.stash_hook
        self.config.write_config_file(
            tool.source.file_path, "settings-file",
            lambda doc: action(doc, meta.event_name, meta.index),
        )
        logger.info(f"{self.id}: hook '{tool.name}' {'enabled' if enabled else 'disabled'} ({tool.scope.value})")

    def _remove_hook(self, tool: NormalizedTool) -> None:
        meta = self._hook_metadata(tool)
        self.config.write_config_file(
            tool.source.file_path, "settings-file",
            lambda doc: writers.remove_hook(doc, meta.event_name, meta.index, meta.stashed),
        )
        logger.info(f"{self.id}: removed hook '{tool.name}' ({tool.scope.value})")

    def install_hook(self, scope: ConfigScope, event_name: str, group: Dict[str, Any], enabled: bool = True) -> None:
        self._check_writable(scope, "install_hook")
        self.config.write_config_file(
            self.get_settings_path(scope), "settings-file",
            lambda doc: writers.add_hook(doc, event_name, group, enabled=enabled),
        )
        logger.info(f"{self.id}: installed {event_name} hook into {scope.value} scope")
