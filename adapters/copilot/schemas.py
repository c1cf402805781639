"""Pydantic schemas for VS Code Copilot's mcp.json and agent files."""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CopilotMcpServerSchema(_Open):
    type: Optional[Literal["stdio", "http", "sse"]] = None
    command: Optional[str] = None
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    env_file: Optional[str] = Field(default=None, alias="envFile")
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None


class CopilotMcpInputSchema(_Open):
    """An ``inputs`` entry; Copilot resolves ``${input:<id>}`` secrets through these."""

    type: str
    id: str
    description: Optional[str] = None
    password: Optional[bool] = None


class CopilotMcpFileSchema(_Open):
    """mcp.json. Uses ``servers`` (not ``mcpServers``); disabled entries are kept in ``_disabledServers``."""

    servers: Dict[str, CopilotMcpServerSchema] = Field(default_factory=dict)
    disabled_servers: Optional[Dict[str, CopilotMcpServerSchema]] = Field(default=None, alias="_disabledServers")
    inputs: List[CopilotMcpInputSchema] = Field(default_factory=list)


class CopilotAgentFrontmatterSchema(_Open):
    name: Optional[str] = None
    description: Optional[str] = None
    tools: Optional[Union[str, List[str]]] = None
    model: Optional[str] = None
    user_invokable: Optional[bool] = Field(default=None, alias="user-invokable")


class CopilotPromptFrontmatterSchema(_Open):
    description: Optional[str] = None
    mode: Optional[str] = None
    model: Optional[str] = None
    tools: Optional[Union[str, List[str]]] = None


COPILOT_SCHEMAS = {
    "copilot-mcp": CopilotMcpFileSchema,
    "copilot-mcp-server": CopilotMcpServerSchema,
    "copilot-agent-frontmatter": CopilotAgentFrontmatterSchema,
    "copilot-prompt-frontmatter": CopilotPromptFrontmatterSchema,
}
