"""Mutations of a Codex config.toml document.

The document is a tomlkit ``TOMLDocument``; editing it in place keeps the
user's comments and unrelated tables intact.
"""

from typing import Any, Dict, Optional

import tomlkit

from models.tool import McpServerMetadata


def build_server_entry(server: McpServerMetadata, enabled: bool = True) -> Dict[str, Any]:
    """Render metadata back into an ``[mcp_servers.<name>]`` table body."""
    entry: Dict[str, Any] = {}
    if server.command:
        entry["command"] = server.command
        if server.args:
            entry["args"] = list(server.args)
    if server.url:
        entry["url"] = server.url
    if server.headers:
        entry["http_headers"] = dict(server.headers)
    entry.update(server.extra)
    if server.env:
        entry["env"] = dict(server.env)
    if not enabled:
        entry["enabled"] = False
    return entry


def _servers(doc: Any, create: bool = False) -> Optional[Any]:
    servers = doc.get("mcp_servers")
    if servers is None and create:
        doc["mcp_servers"] = tomlkit.table(is_super_table=True)
        servers = doc["mcp_servers"]
    return servers


def _server(doc: Any, name: str) -> Optional[Any]:
    servers = _servers(doc)
    if servers is None:
        return None
    return servers.get(name)


def put_mcp_server(doc: Any, name: str, entry: Dict[str, Any]) -> Any:
    servers = _servers(doc, create=True)
    if name in servers:
        del servers[name]
    servers[name] = entry
    return doc


def delete_mcp_server(doc: Any, name: str) -> Any:
    """Delete a server; drop the ``mcp_servers`` table once it is empty."""
    servers = _servers(doc)
    if servers is None:
        return doc
    if name in servers:
        del servers[name]
    if len(servers) == 0:
        del doc["mcp_servers"]
    return doc


def set_server_enabled(doc: Any, name: str, enabled: bool) -> Any:
    """Enabled is the default, so enabling deletes the key instead of writing ``true``."""
    entry = _server(doc, name)
    if entry is None:
        return doc
    if enabled:
        if "enabled" in entry:
            del entry["enabled"]
    else:
        entry["enabled"] = False
    return doc


def set_server_tool_enabled(doc: Any, name: str, tool_name: str, enabled: bool) -> Any:
    """
    Enable or disable one tool exposed by a server.

    Maintains the ``disabled_tools`` denylist and, when present, the
    ``enabled_tools`` allowlist.
    """
    entry = _server(doc, name)
    if entry is None:
        return doc

    allow = list(entry["enabled_tools"]) if "enabled_tools" in entry else None
    deny = [t for t in entry.get("disabled_tools", []) if t != tool_name]

    if enabled:
        if allow is not None and tool_name not in allow:
            allow.append(tool_name)
    else:
        deny.append(tool_name)
        if allow is not None:
            allow = [t for t in allow if t != tool_name]

    for key, values in (("enabled_tools", allow), ("disabled_tools", deny)):
        if values:
            entry[key] = values
        elif key in entry:
            del entry[key]
    return doc


def set_env_var(doc: Any, name: str, key: str, value: str) -> Any:
    entry = _server(doc, name)
    if entry is None:
        return doc
    if "env" not in entry:
        entry["env"] = {}
    entry["env"][key] = value
    return doc


def remove_env_var(doc: Any, name: str, key: str) -> Any:
    entry = _server(doc, name)
    if entry is None or "env" not in entry:
        return doc
    env = entry["env"]
    if key in env:
        del env[key]
    if len(env) == 0:
        del entry["env"]
    return doc
