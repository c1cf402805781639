"""Pydantic schemas for Claude Code config files.

Every model allows extra fields: Claude Code adds settings over time and the
manager must never drop keys it does not know about.
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class HookEntrySchema(_Open):
    """A single command, prompt or agent fired on an event."""

    type: Literal["command", "prompt", "agent"]
    command: Optional[str] = None
    prompt: Optional[str] = None
    timeout: Optional[float] = None


class HookMatcherSchema(_Open):
    """A matcher plus the hooks it triggers."""

    matcher: str = ""
    hooks: List[HookEntrySchema]
    disabled: Optional[bool] = None


class HooksSchema(RootModel[Dict[str, List[HookMatcherSchema]]]):
    pass


class PermissionsSchema(_Open):
    allow: Optional[List[str]] = None
    deny: Optional[List[str]] = None
    ask: Optional[List[str]] = None


class SettingsFileSchema(_Open):
    """settings.json, settings.local.json and managed-settings.json."""

    hooks: Optional[Dict[str, List[HookMatcherSchema]]] = None
    disabled_hooks: Optional[Dict[str, List[HookMatcherSchema]]] = Field(default=None, alias="_disabledHooks")
    permissions: Optional[PermissionsSchema] = None
    env: Optional[Dict[str, str]] = None
    disabled_mcp_servers: Optional[List[str]] = Field(default=None, alias="disabledMcpServers")


class McpServerSchema(_Open):
    """One entry of ``mcpServers``: a stdio command or a remote URL."""

    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    type: Optional[Literal["stdio", "http", "sse"]] = None
    transport: Optional[Literal["stdio", "http", "sse"]] = None
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    disabled: Optional[bool] = None

    @model_validator(mode="after")
    def _command_or_url(self) -> "McpServerSchema":
        if not self.command and not self.url:
            raise ValueError("server needs either 'command' or 'url'")
        return self


class McpFileSchema(_Open):
    """.mcp.json and managed-mcp.json."""

    mcp_servers: Dict[str, McpServerSchema] = Field(default_factory=dict, alias="mcpServers")


class ClaudeJsonSchema(_Open):
    """~/.claude.json. Only ``mcpServers`` is modelled; OAuth state, history and
    preferences pass through untouched."""

    mcp_servers: Dict[str, McpServerSchema] = Field(default_factory=dict, alias="mcpServers")


class SkillFrontmatterSchema(_Open):
    name: str = Field(max_length=64)
    description: str = Field(max_length=1024)
    allowed_tools: Optional[Union[str, List[str]]] = Field(default=None, alias="allowed-tools")
    model: Optional[str] = None
    disable_model_invocation: Optional[bool] = Field(default=None, alias="disable-model-invocation")
    user_invocable: Optional[bool] = Field(default=None, alias="user-invocable")


class CommandFrontmatterSchema(_Open):
    description: Optional[str] = None
    argument_hint: Optional[str] = Field(default=None, alias="argument-hint")
    model: Optional[str] = None
    allowed_tools: Optional[Union[str, List[str]]] = Field(default=None, alias="allowed-tools")


CLAUDE_CODE_SCHEMAS = {
    "settings-file": SettingsFileSchema,
    "mcp-file": McpFileSchema,
    "claude-json": ClaudeJsonSchema,
    "mcp-server": McpServerSchema,
    "skill-frontmatter": SkillFrontmatterSchema,
    "command-frontmatter": CommandFrontmatterSchema,
    "hook-entry": HookEntrySchema,
    "hook-matcher": HookMatcherSchema,
    "hooks": HooksSchema,
}
