"""Pure transforms from a parsed Codex config.toml to NormalizedTool records."""

from pathlib import Path
from typing import Any, Dict, List

from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import McpServerMetadata, NormalizedTool, ToolSource

_KNOWN_SERVER_KEYS = ("command", "args", "env", "url", "http_headers", "enabled")


def server_metadata(entry: Dict[str, Any]) -> McpServerMetadata:
    url = entry.get("url")
    return McpServerMetadata(
        command=entry.get("command"),
        args=list(entry.get("args") or []),
        env=dict(entry.get("env") or {}),
        transport="http" if url else "stdio",
        url=url,
        headers=dict(entry.get("http_headers") or {}),
        extra={k: v for k, v in entry.items() if k not in _KNOWN_SERVER_KEYS},
    )


def parse_mcp_servers(config: Dict[str, Any], scope: ConfigScope, file_path: Path) -> List[NormalizedTool]:
    """
    Convert ``[mcp_servers.*]`` tables into tools.

    A missing ``enabled`` key means enabled; only ``enabled = false`` disables.
    """
    tools = []
    for name, entry in (config.get("mcp_servers") or {}).items():
        entry = entry or {}
        disabled = entry.get("enabled") is False
        tools.append(NormalizedTool(
            id=f"{ToolType.MCP_SERVER.value}:{scope.value}:{name}",
            type=ToolType.MCP_SERVER,
            name=name,
            scope=scope,
            status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
            source=ToolSource(file_path=file_path),
            metadata=server_metadata(entry),
        ))
    return tools
