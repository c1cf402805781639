"""GitHub Copilot (VS Code) adapter.

- user:    <VS Code user dir>/mcp.json (MCP servers only)
- project: .vscode/mcp.json, .github/agents/*.agent.md, .github/prompts/*.prompt.md

Agents are exposed as skills and prompts as commands. MCP servers are
disabled by moving them from ``servers`` into ``_disabledServers``; agents by
``user-invokable: false`` in their front-matter; prompts by the
``.disabled`` suffix. Copilot has no hooks and no managed scope.
"""

import logging
from pathlib import Path
from typing import List, Optional

from adapters.base import ConfigWriter, PlatformAdapter, safe_join, make_error_tool
from adapters.copilot import parsers, paths, writers
from adapters.copilot.schemas import COPILOT_SCHEMAS
from adapters.errors import AdapterError, AdapterScopeError
from adapters.markdown_tools import is_backup_or_temp, parse_commands_dir
from core.file_io import FileIO
from models.bundle import ExportedFile
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import McpServerMetadata, NormalizedTool, SkillMetadata
from utils.platform_paths import get_vscode_user_dir

logger = logging.getLogger(__name__)

MCP_SCHEMA = "copilot-mcp"


class CopilotAdapter(PlatformAdapter):
    """Reads and writes Copilot's mcp.json, custom agents and prompt files."""

    id = "copilot"
    display_name = "GitHub Copilot"
    supported_tool_types = (ToolType.SKILL, ToolType.MCP_SERVER, ToolType.COMMAND)
    supported_scopes = (ConfigScope.USER, ConfigScope.PROJECT)
    skill_file_suffix = parsers.AGENT_SUFFIX
    command_file_suffix = parsers.PROMPT_SUFFIX

    def __init__(
        self,
        config: ConfigWriter,
        file_io: Optional[FileIO] = None,
        home: Optional[Path] = None,
        workspace_root: Optional[Path] = None,
        vscode_user_dir: Optional[Path] = None,
    ):
        super().__init__(config, file_io=file_io, home=home, workspace_root=workspace_root)
        self.vscode_user_dir = Path(vscode_user_dir) if vscode_user_dir else get_vscode_user_dir(self.home)

    @classmethod
    def get_schemas(cls):
        return dict(COPILOT_SCHEMAS)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def get_mcp_file_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return paths.user_mcp_path(self.vscode_user_dir)
        if scope == ConfigScope.PROJECT:
            return paths.workspace_mcp_path(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_mcp_file_path")

    def get_mcp_schema_key(self, scope: ConfigScope) -> str:
        if scope in self.supported_scopes:
            return MCP_SCHEMA
        raise AdapterScopeError(self.display_name, scope, "get_mcp_schema_key")

    def get_skills_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.PROJECT:
            return paths.workspace_agents_dir(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_skills_dir")

    def get_commands_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.PROJECT:
            return paths.workspace_prompts_dir(self._require_root(scope))
        raise AdapterScopeError(self.display_name, scope, "get_commands_dir")

    def get_watch_paths(self, scope: ConfigScope) -> List[Path]:
        if scope == ConfigScope.USER:
            return [paths.user_mcp_path(self.vscode_user_dir)]
        if scope == ConfigScope.PROJECT and self.workspace_root is not None:
            root = self.workspace_root
            return [
                paths.workspace_mcp_path(root),
                paths.workspace_agents_dir(root),
                paths.workspace_prompts_dir(root),
            ]
        return []

    def detect(self) -> bool:
        return paths.user_mcp_path(self.vscode_user_dir).is_file() or paths.copilot_dir(self.home).is_dir()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read_mcp_servers(self, scope: ConfigScope) -> List[NormalizedTool]:
        file_path = self.get_mcp_file_path(scope)
        result = self.config.read_config_file(file_path, MCP_SCHEMA)
        if result.not_found:
            return []
        if not result.ok:
            return [make_error_tool(ToolType.MCP_SERVER, scope, file_path, result.error)]
        return parsers.parse_mcp_servers(result.data, scope, file_path)

    def _read_skills(self, scope: ConfigScope) -> List[NormalizedTool]:
        agents_dir = self.get_skills_dir(scope)
        tools = []
        for path in self.file_io.list_files(agents_dir, recursive=False):
            if is_backup_or_temp(path) or not path.name.endswith(parsers.AGENT_SUFFIX):
                continue
            content = self.file_io.read_text_file(path) or ""
            tools.append(parsers.parse_agent_file(
                path, content,
                lambda data: self.config.validate("copilot-agent-frontmatter", data).errors,
            ))
        return tools

    def _read_commands(self, scope: ConfigScope) -> List[NormalizedTool]:
        return parse_commands_dir(
            self.get_commands_dir(scope), scope, self.file_io,
            suffix=parsers.PROMPT_SUFFIX, recursive=False,
            validate_frontmatter=lambda data: self.config.validate("copilot-prompt-frontmatter", data).errors,
        )

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    def _current_enabled(self, tool: NormalizedTool) -> bool:
        # Agents never carry the suffix; a Warning agent still has its front-matter flag.
        if tool.type == ToolType.SKILL and tool.status == ToolStatus.WARNING:
            extra = tool.metadata.extra if isinstance(tool.metadata, SkillMetadata) else {}
            return extra.get("user-invokable") is not False
        return super()._current_enabled(tool)

    def _set_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        if tool.type == ToolType.SKILL:
            self._set_agent_enabled(tool, enabled)
        else:
            super()._set_enabled(tool, enabled)

    def _set_agent_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        path = tool.source.file_path
        content = self.file_io.read_text_file(path)
        if content is None:
            raise AdapterError(self.display_name, f"agent file {path} is missing")
        self.config.write_text_file(path, writers.set_agent_invokable(content, enabled))
        logger.info(f"{self.id}: agent '{tool.name}' {'enabled' if enabled else 'disabled'}")

    def _set_mcp_server_enabled(self, tool: NormalizedTool, enabled: bool) -> None:
        self.config.write_config_file(
            tool.source.file_path, MCP_SCHEMA,
            lambda doc: writers.set_server_enabled(doc, tool.name, enabled),
        )
        logger.info(f"{self.id}: MCP server '{tool.name}' {'enabled' if enabled else 'disabled'} ({tool.scope.value})")

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _remove_mcp_server(self, tool: NormalizedTool) -> None:
        self.config.write_config_file(
            tool.source.file_path, MCP_SCHEMA,
            lambda doc: writers.delete_server(doc, tool.name),
        )
        logger.info(f"{self.id}: removed MCP server '{tool.name}' ({tool.scope.value})")

    def install_mcp_server(
        self, scope: ConfigScope, name: str, server: McpServerMetadata, enabled: bool = True
    ) -> None:
        self._check_writable(scope, "install_mcp_server")
        entry = writers.build_server_entry(server)
        self.config.write_config_file(
            self.get_mcp_file_path(scope), MCP_SCHEMA,
            lambda doc: writers.put_server(doc, name, entry, enabled=enabled),
        )
        logger.info(f"{self.id}: installed MCP server '{name}' into {scope.value} scope")

    def install_skill(self, scope: ConfigScope, name: str, files: List[ExportedFile]) -> None:
        """Agents are single files, so they land directly in the agents directory."""
        self._check_writable(scope, "install_skill")
        agents_dir = self.get_skills_dir(scope)
        for exported in files:
            self.config.write_text_file(safe_join(agents_dir, exported.name), exported.content)
        logger.info(f"{self.id}: installed agent '{name}' into {scope.value} scope")
