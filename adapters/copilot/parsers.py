"""Pure transforms from Copilot files to NormalizedTool records."""

from pathlib import Path
from typing import Any, Dict, List

from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import McpServerMetadata, NormalizedTool, SkillMetadata, ToolSource
from utils.frontmatter import FrontmatterError, extract_frontmatter

AGENT_SUFFIX = ".agent.md"
PROMPT_SUFFIX = ".prompt.md"

_KNOWN_SERVER_KEYS = ("type", "command", "args", "env", "url", "headers")


def server_metadata(entry: Dict[str, Any]) -> McpServerMetadata:
    return McpServerMetadata(
        command=entry.get("command"),
        args=list(entry.get("args") or []),
        env=dict(entry.get("env") or {}),
        transport=entry.get("type"),
        url=entry.get("url"),
        headers=dict(entry.get("headers") or {}),
        extra={k: v for k, v in entry.items() if k not in _KNOWN_SERVER_KEYS},
    )


def parse_mcp_servers(doc: Dict[str, Any], scope: ConfigScope, file_path: Path) -> List[NormalizedTool]:
    """Active entries come from ``servers``, disabled ones from the ``_disabledServers`` stash."""
    tools = []
    for key, status in (("servers", ToolStatus.ENABLED), ("_disabledServers", ToolStatus.DISABLED)):
        for name, entry in (doc.get(key) or {}).items():
            tools.append(NormalizedTool(
                id=f"{ToolType.MCP_SERVER.value}:{scope.value}:{name}",
                type=ToolType.MCP_SERVER,
                name=name,
                scope=scope,
                status=status,
                source=ToolSource(file_path=file_path),
                metadata=server_metadata(entry or {}),
            ))
    return tools


def parse_agent_file(path: Path, content: str, validate_frontmatter) -> NormalizedTool:
    """
    Build a skill from a ``.agent.md`` file.

    ``user-invokable: false`` in the front-matter marks the agent disabled.
    """
    name = path.name[: -len(AGENT_SUFFIX)]
    tool = NormalizedTool(
        id=f"{ToolType.SKILL.value}:{ConfigScope.PROJECT.value}:{name}",
        type=ToolType.SKILL,
        name=name,
        scope=ConfigScope.PROJECT,
        status=ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        metadata=SkillMetadata(),
    )

    try:
        frontmatter = extract_frontmatter(content)
    except FrontmatterError as e:
        tool.status = ToolStatus.WARNING
        tool.status_detail = str(e)
        return tool

    if frontmatter is None:
        return tool

    data = frontmatter.data
    if data.get("user-invokable") is False:
        tool.status = ToolStatus.DISABLED
    description = data.get("description")
    tool.description = description if isinstance(description, str) else None
    tool.metadata = SkillMetadata(
        allowed_tools=data.get("tools"),
        model=data.get("model"),
        extra={k: v for k, v in data.items() if k not in ("description", "tools", "model")},
    )

    errors = validate_frontmatter(data)
    if errors:
        tool.status = ToolStatus.WARNING
        tool.status_detail = "Invalid frontmatter: " + "; ".join(errors)
    return tool
