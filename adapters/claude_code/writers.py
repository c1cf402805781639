"""Pure mutations of Claude Code documents.

Each function takes the parsed document, edits it in place and returns it,
so it can be passed straight to ``ConfigWriter.write_config_file`` as part
of a mutate callback.
"""

from typing import Any, Dict, Optional

from models.tool import McpServerMetadata


def build_server_entry(server: McpServerMetadata, enabled: bool = True) -> Dict[str, Any]:
    """Render metadata back into an ``mcpServers`` entry."""
    entry: Dict[str, Any] = dict(server.extra)
    if server.transport:
        entry["type"] = server.transport
    if server.command:
        entry["command"] = server.command
        entry["args"] = list(server.args)
    if server.url:
        entry["url"] = server.url
    if server.env:
        entry["env"] = dict(server.env)
    if server.headers:
        entry["headers"] = dict(server.headers)
    if not enabled:
        entry["disabled"] = True
    return entry


def put_mcp_server(doc: Dict[str, Any], name: str, entry: Dict[str, Any]) -> Dict[str, Any]:
    doc.setdefault("mcpServers", {})[name] = entry
    return doc


def delete_mcp_server(doc: Dict[str, Any], name: str) -> Dict[str, Any]:
    servers = doc.get("mcpServers") or {}
    servers.pop(name, None)
    return doc


def set_server_disabled_flag(doc: Dict[str, Any], name: str, disabled: bool) -> Dict[str, Any]:
    entry = (doc.get("mcpServers") or {}).get(name)
    if entry is None:
        return doc
    if disabled:
        entry["disabled"] = True
    else:
        entry.pop("disabled", None)
    return doc


def add_to_disabled_list(settings: Dict[str, Any], name: str) -> Dict[str, Any]:
    names = settings.setdefault("disabledMcpServers", [])
    if name not in names:
        names.append(name)
    return settings


def remove_from_disabled_list(settings: Dict[str, Any], name: str) -> Dict[str, Any]:
    names = settings.get("disabledMcpServers")
    if names and name in names:
        settings["disabledMcpServers"] = [n for n in names if n != name]
    return settings


def _pop_group(settings: Dict[str, Any], key: str, event_name: str, index: int) -> Optional[Dict[str, Any]]:
    groups = (settings.get(key) or {}).get(event_name)
    if not groups or index >= len(groups):
        return None
    group = groups.pop(index)
    if not groups:
        del settings[key][event_name]
    if not settings[key]:
        del settings[key]
    return group


def _append_group(settings: Dict[str, Any], key: str, event_name: str, group: Dict[str, Any]) -> None:
    settings.setdefault(key, {}).setdefault(event_name, []).append(group)


def stash_hook(settings: Dict[str, Any], event_name: str, index: int) -> Dict[str, Any]:
    """Move an active hook group into ``_disabledHooks``."""
    group = _pop_group(settings, "hooks", event_name, index)
    if group is not None:
        group.pop("disabled", None)
        _append_group(settings, "_disabledHooks", event_name, group)
    return settings


def unstash_hook(settings: Dict[str, Any], event_name: str, index: int) -> Dict[str, Any]:
    """Move a stashed hook group back into ``hooks``."""
    group = _pop_group(settings, "_disabledHooks", event_name, index)
    if group is not None:
        _append_group(settings, "hooks", event_name, group)
    return settings


def clear_hook_disabled_flag(settings: Dict[str, Any], event_name: str, index: int) -> Dict[str, Any]:
    groups = (settings.get("hooks") or {}).get(event_name) or []
    if index < len(groups):
        groups[index].pop("disabled", None)
    return settings


def remove_hook(settings: Dict[str, Any], event_name: str, index: int, stashed: bool) -> Dict[str, Any]:
    _pop_group(settings, "_disabledHooks" if stashed else "hooks", event_name, index)
    return settings


def add_hook(settings: Dict[str, Any], event_name: str, group: Dict[str, Any], enabled: bool = True) -> Dict[str, Any]:
    entry = dict(group)
    entry.setdefault("matcher", "")
    entry.pop("disabled", None)
    _append_group(settings, "hooks" if enabled else "_disabledHooks", event_name, entry)
    return settings
