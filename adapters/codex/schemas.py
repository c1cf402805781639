"""Pydantic schemas for Codex config.toml and skill manifests."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CodexMcpServerSchema(_Open):
    """One ``[mcp_servers.<name>]`` table. Codex marks disabled servers with ``enabled = false``."""

    command: Optional[str] = None
    args: Optional[List[str]] = None
    url: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    http_headers: Optional[Dict[str, str]] = None
    enabled: Optional[bool] = None
    enabled_tools: Optional[List[str]] = None
    disabled_tools: Optional[List[str]] = None
    startup_timeout_sec: Optional[float] = None
    tool_timeout_sec: Optional[float] = None

    @model_validator(mode="after")
    def _command_or_url(self) -> "CodexMcpServerSchema":
        if not self.command and not self.url:
            raise ValueError("server needs either 'command' or 'url'")
        return self


class CodexConfigSchema(_Open):
    """config.toml. Auth, history and provider tables pass through untouched."""

    model: Optional[str] = None
    model_provider: Optional[str] = None
    approval_policy: Optional[Literal["untrusted", "on-failure", "on-request", "never",
                                      "suggest", "auto-edit", "full-auto"]] = None
    sandbox_mode: Optional[Literal["read-only", "workspace-write", "danger-full-access"]] = None
    mcp_servers: Optional[Dict[str, CodexMcpServerSchema]] = None
    profile: Optional[str] = None
    profiles: Optional[Dict[str, dict]] = None


class CodexSkillFrontmatterSchema(_Open):
    name: str = Field(max_length=100)
    description: str = Field(max_length=500)


class CodexPromptFrontmatterSchema(_Open):
    description: Optional[str] = None
    argument_hint: Optional[str] = Field(default=None, alias="argument-hint")


CODEX_SCHEMAS = {
    "codex-config": CodexConfigSchema,
    "codex-mcp-server": CodexMcpServerSchema,
    "codex-skill-frontmatter": CodexSkillFrontmatterSchema,
    "codex-prompt-frontmatter": CodexPromptFrontmatterSchema,
}
