"""Canonical, format-independent identity for tools."""

from typing import Optional

from models.enums import ToolType
from models.tool import HookMetadata, NormalizedTool


def canonical_key(tool: NormalizedTool) -> str:
    """
    Build the identity string used by profiles and scope resolution.

    Hooks have no name of their own, so they are keyed by event and matcher.
    Every other tool is keyed by type and name. Scope and on-disk location
    never enter the key.
    """
    if tool.type == ToolType.HOOK and isinstance(tool.metadata, HookMetadata):
        return hook_key(tool.metadata.event_name, tool.metadata.matcher)
    return f"{tool.type.value}:{tool.name}"


def hook_key(event_name: str, matcher: Optional[str]) -> str:
    return f"{ToolType.HOOK.value}:{event_name}:{matcher or ''}"


def extract_tool_type_from_key(key: str) -> Optional[ToolType]:
    """Return the ToolType prefix of a canonical key, or None when unrecognised."""
    prefix = key.split(":", 1)[0]
    try:
        return ToolType(prefix)
    except ValueError:
        return None
