"""Mutations of Copilot's mcp.json and agent files."""

from typing import Any, Dict, Optional

from models.tool import McpServerMetadata
from utils.frontmatter import set_frontmatter_field

STASH_KEY = "_disabledServers"


def build_server_entry(server: McpServerMetadata) -> Dict[str, Any]:
    entry: Dict[str, Any] = {}
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
    entry.update(server.extra)
    return entry


def _pop_server(doc: Dict[str, Any], key: str, name: str) -> Optional[Dict[str, Any]]:
    servers = doc.get(key)
    if not servers or name not in servers:
        return None
    entry = servers.pop(name)
    if key == STASH_KEY and not servers:
        del doc[key]
    return entry


def set_server_enabled(doc: Dict[str, Any], name: str, enabled: bool) -> Dict[str, Any]:
    """Move a server between ``servers`` and the ``_disabledServers`` stash."""
    source, target = (STASH_KEY, "servers") if enabled else ("servers", STASH_KEY)
    entry = _pop_server(doc, source, name)
    if entry is not None:
        doc.setdefault(target, {})[name] = entry
    return doc


def put_server(doc: Dict[str, Any], name: str, entry: Dict[str, Any], enabled: bool = True) -> Dict[str, Any]:
    _pop_server(doc, "servers", name)
    _pop_server(doc, STASH_KEY, name)
    doc.setdefault("servers" if enabled else STASH_KEY, {})[name] = entry
    return doc


def delete_server(doc: Dict[str, Any], name: str) -> Dict[str, Any]:
    _pop_server(doc, "servers", name)
    _pop_server(doc, STASH_KEY, name)
    return doc


def set_agent_invokable(content: str, enabled: bool) -> str:
    """Enabling removes the ``user-invokable`` key; disabling writes ``false``."""
    return set_frontmatter_field(content, "user-invokable", None if enabled else False)
