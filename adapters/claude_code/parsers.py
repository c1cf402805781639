"""Pure transforms from parsed Claude Code documents to NormalizedTool records."""

from pathlib import Path
from typing import Any, Dict, Iterable, List

from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import HookMetadata, McpServerMetadata, NormalizedTool, ToolSource

_KNOWN_SERVER_KEYS = ("command", "args", "env", "type", "transport", "url", "headers", "disabled")
_KNOWN_MATCHER_KEYS = ("matcher", "hooks", "disabled")


def server_metadata(entry: Dict[str, Any]) -> McpServerMetadata:
    """Split a raw ``mcpServers`` entry into known fields and passthrough extras."""
    return McpServerMetadata(
        command=entry.get("command"),
        args=list(entry.get("args") or []),
        env=dict(entry.get("env") or {}),
        transport=entry.get("type") or entry.get("transport"),
        url=entry.get("url"),
        headers=dict(entry.get("headers") or {}),
        extra={k: v for k, v in entry.items() if k not in _KNOWN_SERVER_KEYS},
    )


def parse_mcp_servers(
    servers: Dict[str, Any],
    scope: ConfigScope,
    file_path: Path,
    disabled_names: Iterable[str] = (),
) -> List[NormalizedTool]:
    """
    Convert an ``mcpServers`` mapping into tools.

    A server is disabled when it carries ``disabled: true`` or when its name
    appears in the scope's ``disabledMcpServers`` list.
    """
    disabled_set = set(disabled_names)
    tools = []
    for name, entry in servers.items():
        entry = entry or {}
        disabled = name in disabled_set or entry.get("disabled") is True
        tools.append(NormalizedTool(
            id=f"{ToolType.MCP_SERVER.value}:{scope.value}:{name}",
            type=ToolType.MCP_SERVER,
            name=name,
            scope=scope,
            status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
            source=ToolSource(file_path=file_path),
            metadata=server_metadata(entry),
            description=entry.get("description") if isinstance(entry.get("description"), str) else None,
        ))
    return tools


def read_disabled_mcp_servers(settings: Dict[str, Any]) -> List[str]:
    names = settings.get("disabledMcpServers") or []
    return [n for n in names if isinstance(n, str)]


def _hook_label(event_name: str, matcher: str) -> str:
    return f"{event_name} ({matcher})" if matcher else event_name


def _hook_description(group: Dict[str, Any]) -> str:
    parts = []
    for hook in group.get("hooks") or []:
        parts.append(hook.get("command") or hook.get("prompt") or hook.get("type", ""))
    return ", ".join(p for p in parts if p)


def _make_hook_tool(
    group: Dict[str, Any],
    event_name: str,
    index: int,
    scope: ConfigScope,
    file_path: Path,
    stashed: bool,
) -> NormalizedTool:
    matcher = group.get("matcher") or ""
    disabled = stashed or group.get("disabled") is True
    discriminator = f"{event_name}:stashed" if stashed else event_name
    return NormalizedTool(
        id=f"{ToolType.HOOK.value}:{scope.value}:{discriminator}:{index}",
        type=ToolType.HOOK,
        name=_hook_label(event_name, matcher),
        scope=scope,
        status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
        source=ToolSource(file_path=file_path),
        metadata=HookMetadata(
            event_name=event_name,
            matcher=matcher,
            hooks=[dict(h) for h in group.get("hooks") or []],
            index=index,
            stashed=stashed,
            extra={k: v for k, v in group.items() if k not in _KNOWN_MATCHER_KEYS},
        ),
        description=_hook_description(group) or None,
    )


def parse_hooks(settings: Dict[str, Any], scope: ConfigScope, file_path: Path) -> List[NormalizedTool]:
    """Read active ``hooks`` and stashed ``_disabledHooks`` groups from a settings document."""
    tools = []
    for key, stashed in (("hooks", False), ("_disabledHooks", True)):
        for event_name, groups in (settings.get(key) or {}).items():
            for index, group in enumerate(groups or []):
                tools.append(_make_hook_tool(group, event_name, index, scope, file_path, stashed))
    return tools
