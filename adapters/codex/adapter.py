"""Codex adapter.

MCP servers live in ``config.toml`` under ``[mcp_servers.<name>]`` and are
disabled with ``enabled = false``. Skills are SKILL.md directories; custom
prompts in ``~/.codex/prompts`` are exposed as commands. Codex has no hooks.
"""

import logging
from pathlib import Path
from typing import List

from adapters.base import PlatformAdapter, make_error_tool
from adapters.codex import parsers, paths, writers
from adapters.codex.schemas import CODEX_SCHEMAS
from adapters.errors import AdapterError, AdapterScopeError
from adapters.markdown_tools import parse_commands_dir, parse_skills_dir
from models.enums import ConfigScope, ToolType
from models.tool import McpServerMetadata, NormalizedTool

logger = logging.getLogger(__name__)

CONFIG_SCHEMA = "codex-config"


class CodexAdapter(PlatformAdapter):
    """Reads and writes Codex's TOML config, skills and prompts."""

    id = "codex"
    display_name = "Codex"
    supported_tool_types = (ToolType.SKILL, ToolType.MCP_SERVER, ToolType.COMMAND)
    supported_scopes = (ConfigScope.USER, ConfigScope.PROJECT)

    @classmethod
    def get_schemas(cls):
        return dict(CODEX_SCHEMAS)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def get_config_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_config_path(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_config_path(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_config_path")

    def get_mcp_file_path(self, scope: ConfigScope) -> Path:
        try:
            return self.get_config_path(scope)
        except AdapterScopeError:
            raise AdapterScopeError(self.display_name, scope, "get_mcp_file_path") from None

    def get_mcp_schema_key(self, scope: ConfigScope) -> str:
        if scope in self.supported_scopes:
            return CONFIG_SCHEMA
        raise AdapterScopeError(self.display_name, scope, "get_mcp_schema_key")

    def get_skills_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_skills_dir(self.home)
        if scope == ConfigScope.PROJECT:
            return paths.project_skills_dir(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_skills_dir")

    def get_commands_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_prompts_dir(self.home)
        raise AdapterScopeError(self.display_name, scope, "get_commands_dir")

    def get_watch_paths(self, scope: ConfigScope) -> List[Path]:
        if scope == ConfigScope.USER:
            return [
                paths.user_config_path(self.home),
                paths.user_skills_dir(self.home),
                paths.user_prompts_dir(self.home),
            ]
        if scope == ConfigScope.PROJECT and self.workspace_root is not None:
            return [
                paths.project_config_path(self.workspace_root),
                paths.project_skills_dir(self.workspace_root),
            ]
        return []

    def detect(self) -> bool:
        return paths.codex_dir(self.home).is_dir()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read_mcp_servers(self, scope: ConfigScope) -> List[NormalizedTool]:
        file_path = self.get_config_path(scope)
        result = self.config.read_config_file(file_path, CONFIG_SCHEMA)
        if result.not_found:
            return []
        if not result.ok:
            return [make_error_tool(ToolType.MCP_SERVER, scope, file_path, result.error)]
        return parsers.parse_mcp_servers(result.data, scope, file_path)

    def _read_skills(self, scope: ConfigScope) -> List[NormalizedTool]:
        return parse_skills_dir(
            self.get_skills_dir(scope), scope, self.file_io,
            lambda data: self.config.validate("codex-skill-frontmatter", data).errors,
        )

    def _read_commands(self, scope: ConfigScope) -> List[NormalizedTool]:
        return parse_commands_dir(
            self.get_commands_dir(scope), scope, self.file_io, recursive=False,
            validate_frontmatter=lambda data: self.config.validate("codex-prompt-frontmatter", data).errors,
        )

    # ------------------------------------------------------------------
    # MCP servers
    # ------------------------------------------------------------------

    def _write(self, scope: ConfigScope, mutate) -> None:
        self.config.write_config_file(self.get_config_path(scope), CONFIG_SCHEMA, mutate)

    def _set_mcp_server_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        self._write(tool.scope, lambda doc: writers.set_server_enabled(doc, tool.name, enabled))
        logger.info(f"{self.id}: MCP server '{tool.name}' {'enabled' if enabled else 'disabled'} ({tool.scope.value})")

    def _remove_mcp_server(self, tool: NormalizedTool) -> None:
        self._write(tool.scope, lambda doc: writers.delete_mcp_server(doc, tool.name))
        logger.info(f"{self.id}: removed MCP server '{tool.name}' ({tool.scope.value})")

    def install_mcp_server(
        self, scope: ConfigScope, name: str, server: McpServerMetadata, enabled: bool = True
    ) -> None:
        self._check_writable(scope, "install_mcp_server")
        entry = writers.build_server_entry(server, enabled=enabled)
        self._write(scope, lambda doc: writers.put_mcp_server(doc, name, entry))
        logger.info(f"{self.id}: installed MCP server '{name}' into {scope.value} scope")

    def _require_server(self, tool: NormalizedTool, operation: str) -> None:
        if tool.type != ToolType.MCP_SERVER:
            raise AdapterError(self.display_name, f"{operation} only applies to MCP servers")
        self._check_writable(tool.scope, operation)

    def set_server_tool_enabled(self, tool: NormalizedTool, tool_name: str, enabled: bool) -> None:
        """Allow or deny one tool exposed by an MCP server."""
        self._require_server(tool, "set_server_tool_enabled")
        self._write(tool.scope, lambda doc: writers.set_server_tool_enabled(doc, tool.name, tool_name, enabled))

    def set_env_var(self, tool: NormalizedTool, key: str, value: str) -> None:
        self._require_server(tool, "set_env_var")
        self._write(tool.scope, lambda doc: writers.set_env_var(doc, tool.name, key, value))

    def remove_env_var(self, tool: NormalizedTool, key: str) -> None:
        self._require_server(tool, "remove_env_var")
        self._write(tool.scope, lambda doc: writers.remove_env_var(doc, tool.name, key))
