"""Portable profile bundle: a profile plus the embedded content of its tools."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from models.enums import ToolType
from models.tool import NormalizedTool


@dataclass
class ExportedFile:
    """A file shipped verbatim inside a bundle. ``name`` is relative to the tool root."""

    name: str
    content: str

    def to_dict(self) -> dict:
        return {"name": self.name, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> "ExportedFile":
        return cls(name=data["name"], content=data["content"])


@dataclass
class McpServerConfig:
    command: Optional[str] = None
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    transport: Optional[str] = None
    url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    kind: str = ToolType.MCP_SERVER.value

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"kind": self.kind, "command": self.command, "args": self.args, "env": self.env}
        if self.transport:
            data["transport"] = self.transport
        if self.url:
            data["url"] = self.url
        if self.headers:
            data["headers"] = self.headers
        return data


@dataclass
class FilesConfig:
    """Skill or command content. ``kind`` is ``skill`` or ``command``."""

    kind: str
    files: List[ExportedFile] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "files": [f.to_dict() for f in self.files]}

    def file_content(self, name: str) -> Optional[str]:
        for exported in self.files:
            if exported.name == name:
                return exported.content
        return None


@dataclass
class HookConfig:
    event_name: str
    matcher: str = ""
    hooks: List[Dict[str, Any]] = field(default_factory=list)
    kind: str = ToolType.HOOK.value

    def to_dict(self) -> dict:
        return {"kind": self.kind, "eventName": self.event_name, "matcher": self.matcher, "hooks": self.hooks}


ExportedToolConfig = Union[McpServerConfig, FilesConfig, HookConfig]


def config_from_dict(data: dict) -> ExportedToolConfig:
    """Rebuild a config payload from its ``kind`` discriminator."""
    kind = data["kind"]
    if kind == ToolType.MCP_SERVER.value:
        return McpServerConfig(
            command=data.get("command"),
            args=list(data.get("args") or []),
            env=dict(data.get("env") or {}),
            transport=data.get("transport"),
            url=data.get("url"),
            headers=dict(data.get("headers") or {}),
        )
    if kind in (ToolType.SKILL.value, ToolType.COMMAND.value):
        return FilesConfig(kind=kind, files=[ExportedFile.from_dict(f) for f in data.get("files", [])])
    if kind == ToolType.HOOK.value:
        return HookConfig(
            event_name=data["eventName"],
            matcher=data.get("matcher") or "",
            hooks=list(data.get("hooks") or []),
        )
    raise ValueError(f"Unknown tool config kind: {kind}")


@dataclass
class ExportedTool:
    key: str
    enabled: bool
    type: ToolType
    name: str
    config: ExportedToolConfig

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "enabled": self.enabled,
            "type": self.type.value,
            "name": self.name,
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExportedTool":
        return cls(
            key=data["key"],
            enabled=bool(data["enabled"]),
            type=ToolType(data["type"]),
            name=data["name"],
            config=config_from_dict(data["config"]),
        )


@dataclass
class BundleProfileInfo:
    name: str
    created_at: str
    updated_at: str
    exported_at: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "exportedAt": self.exported_at,
        }


@dataclass
class ProfileExportBundle:
    """Self-contained export of a profile, usable on a machine without the tools installed."""

    bundle_type: str
    version: int
    agent_id: str
    profile: BundleProfileInfo
    tools: List[ExportedTool] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "bundleType": self.bundle_type,
            "version": self.version,
            "agentId": self.agent_id,
            "profile": self.profile.to_dict(),
            "tools": [tool.to_dict() for tool in self.tools],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileExportBundle":
        profile = data["profile"]
        return cls(
            bundle_type=data["bundleType"],
            version=data["version"],
            agent_id=data["agentId"],
            profile=BundleProfileInfo(
                name=profile["name"],
                created_at=profile["createdAt"],
                updated_at=profile["updatedAt"],
                exported_at=profile["exportedAt"],
            ),
            tools=[ExportedTool.from_dict(t) for t in data.get("tools", [])],
        )


@dataclass
class ImportConflict:
    exported: ExportedTool
    local: NormalizedTool


@dataclass
class ImportAnalysis:
    """Three-way classification of bundle entries against the local environment."""

    matching: List[ExportedTool] = field(default_factory=list)
    conflicts: List[ImportConflict] = field(default_factory=list)
    missing: List[ExportedTool] = field(default_factory=list)


@dataclass
class BundleValidation:
    valid: bool
    bundle: Optional[ProfileExportBundle] = None
    error: Optional[str] = None
    requires_conversion: bool = False


@dataclass
class BundleConversion:
    bundle: ProfileExportBundle
    kept: int
    dropped: int
    dropped_types: List[ToolType] = field(default_factory=list)


@dataclass
class InstallResult:
    installed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed
