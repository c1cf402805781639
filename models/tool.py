"""Normalized tool model shared by every agent platform."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models.enums import ConfigScope, ToolStatus, ToolType


@dataclass
class ToolSource:
    """Where on disk a tool's truth lives."""

    file_path: Path
    is_directory: bool = False
    directory_path: Optional[Path] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_path": str(self.file_path),
            "is_directory": self.is_directory,
            "directory_path": str(self.directory_path) if self.directory_path else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ToolSource":
        """Create from dictionary loaded from JSON."""
        directory = data.get("directory_path")
        return cls(
            file_path=Path(data["file_path"]),
            is_directory=data.get("is_directory", False),
            directory_path=Path(directory) if directory else None,
        )


@dataclass
class McpServerMetadata:
    """Launch configuration of an MCP server."""

    command: Optional[str] = None
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    transport: Optional[str] = None  # stdio, http, sse
    url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "transport": self.transport,
            "url": self.url,
            "headers": dict(self.headers),
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "McpServerMetadata":
        return cls(
            command=data.get("command"),
            args=list(data.get("args") or []),
            env=dict(data.get("env") or {}),
            transport=data.get("transport"),
            url=data.get("url"),
            headers=dict(data.get("headers") or {}),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class HookMetadata:
    """One matcher group of a lifecycle hook event."""

    event_name: str
    matcher: str = ""
    hooks: List[Dict[str, Any]] = field(default_factory=list)
    index: int = 0  # position within the event's active or stashed list
    stashed: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "event_name": self.event_name,
            "matcher": self.matcher,
            "hooks": [dict(h) for h in self.hooks],
            "index": self.index,
            "stashed": self.stashed,
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HookMetadata":
        return cls(
            event_name=data["event_name"],
            matcher=data.get("matcher") or "",
            hooks=list(data.get("hooks") or []),
            index=data.get("index", 0),
            stashed=data.get("stashed", False),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class SkillMetadata:
    """Front-matter fields of a skill manifest."""

    allowed_tools: Optional[Union[str, List[str]]] = None
    model: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"allowed_tools": self.allowed_tools, "model": self.model, "extra": dict(self.extra)}

    @classmethod
    def from_dict(cls, data: dict) -> "SkillMetadata":
        return cls(
            allowed_tools=data.get("allowed_tools"),
            model=data.get("model"),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class CommandMetadata:
    """Front-matter fields of a slash command or prompt file."""

    argument_hint: Optional[str] = None
    model: Optional[str] = None
    allowed_tools: Optional[Union[str, List[str]]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "argument_hint": self.argument_hint,
            "model": self.model,
            "allowed_tools": self.allowed_tools,
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CommandMetadata":
        return cls(
            argument_hint=data.get("argument_hint"),
            model=data.get("model"),
            allowed_tools=data.get("allowed_tools"),
            extra=dict(data.get("extra") or {}),
        )


ToolMetadata = Union[McpServerMetadata, HookMetadata, SkillMetadata, CommandMetadata]

_METADATA_TYPES = {
    ToolType.MCP_SERVER: McpServerMetadata,
    ToolType.HOOK: HookMetadata,
    ToolType.SKILL: SkillMetadata,
    ToolType.COMMAND: CommandMetadata,
}


def metadata_from_dict(tool_type: ToolType, data: dict) -> ToolMetadata:
    """Rebuild the metadata variant that belongs to ``tool_type``."""
    return _METADATA_TYPES[tool_type].from_dict(data)


@dataclass
class ScopeEntry:
    """One sighting of a tool in a particular scope."""

    scope: ConfigScope
    status: ToolStatus
    file_path: Path
    is_active: bool = False

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.value,
            "status": self.status.value,
            "file_path": str(self.file_path),
            "is_active": self.is_active,
        }


@dataclass
class NormalizedTool:
    """Canonical, platform-independent view of a single tool."""

    id: str
    type: ToolType
    name: str
    scope: ConfigScope
    status: ToolStatus
    source: ToolSource
    metadata: Optional[ToolMetadata] = None
    description: Optional[str] = None
    status_detail: Optional[str] = None
    scope_entries: List[ScopeEntry] = field(default_factory=list)

    @property
    def is_enabled(self) -> bool:
        return self.status == ToolStatus.ENABLED

    @property
    def is_managed(self) -> bool:
        return self.scope == ConfigScope.MANAGED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "scope": self.scope.value,
            "status": self.status.value,
            "source": self.source.to_dict(),
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "description": self.description,
            "status_detail": self.status_detail,
            "scope_entries": [entry.to_dict() for entry in self.scope_entries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NormalizedTool":
        """Create from dictionary loaded from JSON."""
        tool_type = ToolType(data["type"])
        metadata = data.get("metadata")
        return cls(
            id=data["id"],
            type=tool_type,
            name=data["name"],
            scope=ConfigScope(data["scope"]),
            status=ToolStatus(data["status"]),
            source=ToolSource.from_dict(data["source"]),
            metadata=metadata_from_dict(tool_type, metadata) if metadata else None,
            description=data.get("description"),
            status_detail=data.get("status_detail"),
            scope_entries=[
                ScopeEntry(
                    scope=ConfigScope(entry["scope"]),
                    status=ToolStatus(entry["status"]),
                    file_path=Path(entry["file_path"]),
                    is_active=entry.get("is_active", False),
                )
                for entry in data.get("scope_entries", [])
            ],
        )
