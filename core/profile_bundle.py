"""Profile export and import.

A bundle embeds the content of every tool a profile references (MCP launch
config, skill and command files, hook definitions) so it can be installed
on a machine that has none of those tools yet.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from adapters.base import PlatformAdapter, strip_disabled_suffix
from adapters.markdown_tools import collect_tool_files
from core.adapter_registry import AdapterRegistry
from core.file_io import FileIO, atomic_write
from core.profile_manager import ProfileManager
from core.schema_registry import SchemaRegistry
from core.store_schemas import STORE_SCHEMAS
from models.bundle import (
    BundleConversion,
    BundleProfileInfo,
    BundleValidation,
    ExportedFile,
    ExportedTool,
    FilesConfig,
    HookConfig,
    ImportAnalysis,
    ImportConflict,
    InstallResult,
    McpServerConfig,
    ProfileExportBundle,
)
from models.enums import ConfigScope, ToolStatus, ToolType
from models.profile import Profile, ProfileToolEntry
from models.tool import HookMetadata, McpServerMetadata, NormalizedTool, ToolSource
from utils.constants import BUNDLE_EXTENSION, BUNDLE_TYPE, BUNDLE_VERSION, ERROR_MESSAGES, IMPORTED_SUFFIX
from utils.jsonc import dumps_pretty
from utils.validators import validate_mcp_server_config

logger = logging.getLogger(__name__)

BUNDLE_SCHEMA = "profile-bundle"


def bundle_file_name(profile_name: str, agent_id: str) -> str:
    """``My Profile`` for ``codex`` -> ``my-profile.codex.tkprofile``."""
    slug = re.sub(r"[^a-z0-9]+", "-", profile_name.lower()).strip("-") or "profile"
    return f"{slug}.{agent_id}{BUNDLE_EXTENSION}"


def _files_of(tool: NormalizedTool, file_io: FileIO) -> List[ExportedFile]:
    if tool.source.is_directory and tool.source.directory_path:
        return [ExportedFile(name=name, content=content)
                for name, content in collect_tool_files(tool.source.directory_path, file_io)]
    content = file_io.read_text_file(tool.source.file_path)
    if content is None:
        return []
    return [ExportedFile(name=strip_disabled_suffix(tool.source.file_path.name), content=content)]


def _is_equivalent(exported: ExportedTool, local: NormalizedTool, file_io: FileIO) -> bool:
    """
    Type-specific "same tool" heuristic.

    MCP servers compare command, args, url and the number of env vars;
    hooks compare event, matcher and hook count; skills and commands
    compare their embedded files.
    """
    config = exported.config
    if isinstance(config, McpServerConfig):
        meta = local.metadata if isinstance(local.metadata, McpServerMetadata) else McpServerMetadata()
        return (
            config.command == meta.command
            and list(config.args) == list(meta.args)
            and config.url == meta.url
            and len(config.env) == len(meta.env)
        )
    if isinstance(config, HookConfig):
        if not isinstance(local.metadata, HookMetadata):
            return False
        return (
            config.event_name == local.metadata.event_name
            and config.matcher == local.metadata.matcher
            and len(config.hooks) == len(local.metadata.hooks)
        )
    local_files = {f.name: f.content for f in _files_of(local, file_io)}
    return local_files == {f.name: f.content for f in config.files}


class ProfileBundleService:
    """Builds, checks, converts and installs profile bundles."""

    def __init__(
        self,
        profiles: ProfileManager,
        registry: AdapterRegistry,
        file_io: Optional[FileIO] = None,
        schemas: Optional[SchemaRegistry] = None,
    ):
        self.profiles = profiles
        self.registry = registry
        self.file_io = file_io or FileIO()
        self.schemas = schemas or SchemaRegistry()
        if not self.schemas.has_schema(BUNDLE_SCHEMA):
            self.schemas.register_schemas(STORE_SCHEMAS)

    def _active_adapter(self) -> PlatformAdapter:
        adapter = self.registry.get_active_adapter()
        if adapter is None:
            raise RuntimeError(ERROR_MESSAGES["NO_ACTIVE_AGENT"])
        return adapter

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _export_tool(self, tool: NormalizedTool, entry: ProfileToolEntry) -> ExportedTool:
        if tool.type == ToolType.MCP_SERVER:
            meta = tool.metadata if isinstance(tool.metadata, McpServerMetadata) else McpServerMetadata()
            config: Any = McpServerConfig(
                command=meta.command,
                args=list(meta.args),
                env=dict(meta.env),
                transport=meta.transport,
                url=meta.url,
                headers=dict(meta.headers),
            )
        elif tool.type == ToolType.HOOK:
            meta = tool.metadata
            config = HookConfig(event_name=meta.event_name, matcher=meta.matcher, hooks=[dict(h) for h in meta.hooks])
        else:
            config = FilesConfig(kind=tool.type.value, files=_files_of(tool, self.file_io))

        return ExportedTool(key=entry.key, enabled=entry.enabled, type=tool.type, name=tool.name, config=config)

    def export_profile(self, profile_id: str) -> Optional[ProfileExportBundle]:
        """
        Build a self-contained bundle for a profile.

        Entries whose tools no longer exist are left out without error.

        Returns:
            The bundle, or None when the profile does not exist
        """
        profile = self.profiles.get_profile(profile_id)
        if profile is None:
            return None

        adapter = self._active_adapter()
        live = self.profiles.live_tools()
        tools = []
        for entry in profile.tools:
            tool = live.get(entry.key)
            if tool is None:
                logger.debug(f"Export of '{profile.name}' skips missing {entry.key}")
                continue
            tools.append(self._export_tool(tool, entry))

        bundle = ProfileExportBundle(
            bundle_type=BUNDLE_TYPE,
            version=BUNDLE_VERSION,
            agent_id=adapter.id,
            profile=BundleProfileInfo(
                name=profile.name,
                created_at=profile.created_at.isoformat(),
                updated_at=profile.updated_at.isoformat(),
                exported_at=datetime.now(timezone.utc).isoformat(),
            ),
            tools=tools,
        )
        logger.info(f"Exported profile '{profile.name}' with {len(tools)} of {len(profile.tools)} tools")
        return bundle

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def validate_import_bundle(self, data: Any, agent_id: Optional[str] = None) -> BundleValidation:
        """
        Check that ``data`` is a bundle this version can import.

        Args:
            data: Parsed bundle document
            agent_id: Agent the bundle is about to be imported into

        Returns:
            BundleValidation; ``requires_conversion`` is set when the bundle was
            made for a different agent
        """
        if not isinstance(data, dict) or data.get("bundleType") != BUNDLE_TYPE:
            return BundleValidation(valid=False, error=ERROR_MESSAGES["BUNDLE_INVALID"])

        version = data.get("version")
        if version != BUNDLE_VERSION:
            return BundleValidation(
                valid=False,
                error=ERROR_MESSAGES["BUNDLE_VERSION"].format(version=version, expected=BUNDLE_VERSION),
            )

        validation = self.schemas.validate(BUNDLE_SCHEMA, data)
        if not validation.success:
            return BundleValidation(valid=False, error="Invalid profile bundle: " + "; ".join(validation.errors))

        try:
            bundle = ProfileExportBundle.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            return BundleValidation(valid=False, error=f"Invalid profile bundle: {e}")

        requires_conversion = agent_id is not None and bundle.agent_id != agent_id
        return BundleValidation(valid=True, bundle=bundle, requires_conversion=requires_conversion)

    def convert_bundle_for_agent(self, bundle: ProfileExportBundle, adapter: PlatformAdapter) -> BundleConversion:
        """Keep the tools ``adapter`` supports, reshaping embedded files to its layout."""
        kept: List[ExportedTool] = []
        dropped_types: List[ToolType] = []
        for tool in bundle.tools:
            if tool.type not in adapter.supported_tool_types:
                if tool.type not in dropped_types:
                    dropped_types.append(tool.type)
                continue
            config = tool.config
            if isinstance(config, FilesConfig):
                config = FilesConfig(kind=config.kind, files=adapter.adapt_exported_files(tool.type, tool.name, config.files))
            kept.append(ExportedTool(key=tool.key, enabled=tool.enabled, type=tool.type, name=tool.name, config=config))

        converted = ProfileExportBundle(
            bundle_type=bundle.bundle_type,
            version=bundle.version,
            agent_id=adapter.id,
            profile=bundle.profile,
            tools=kept,
        )
        dropped = len(bundle.tools) - len(kept)
        if dropped:
            logger.info(f"Converted bundle for {adapter.id}: dropped {dropped} unsupported tools")
        return BundleConversion(bundle=converted, kept=len(kept), dropped=dropped, dropped_types=dropped_types)

    def analyze_import(self, bundle: ProfileExportBundle) -> ImportAnalysis:
        """Classify every bundle entry as matching, conflicting or missing locally."""
        live = self.profiles.live_tools()
        analysis = ImportAnalysis()
        for exported in bundle.tools:
            local = live.get(exported.key)
            if local is None:
                analysis.missing.append(exported)
            elif _is_equivalent(exported, local, self.file_io):
                analysis.matching.append(exported)
            else:
                analysis.conflicts.append(ImportConflict(exported=exported, local=local))
        return analysis

    def import_profile(
        self,
        bundle: ProfileExportBundle,
        name: Optional[str] = None,
        overwrite: bool = False,
    ) -> Tuple[bool, Optional[str], Optional[Profile]]:
        """
        Create a profile from a bundle's entries.

        Tool content is not installed here; see ``install_bundle_tools``.

        Args:
            bundle: Validated (and, if needed, converted) bundle
            name: Profile name; defaults to the bundle's
            overwrite: Replace an existing profile with the same name instead
                of suffixing `` (imported)``

        Returns:
            Tuple of (success, error_message, profile)
        """
        final_name = name or bundle.profile.name
        existing = self.profiles.find_profile_by_name(final_name)
        if existing is not None:
            if overwrite:
                success, error = self.profiles.delete_profile(existing.id)
                if not success:
                    return False, error, None
            else:
                while self.profiles.find_profile_by_name(final_name) is not None:
                    final_name = f"{final_name}{IMPORTED_SUFFIX}"

        entries = [ProfileToolEntry(key=tool.key, enabled=tool.enabled) for tool in bundle.tools]
        return self.profiles.create_profile(final_name, tools=entries)

    def install_bundle_tools(
        self,
        bundle: ProfileExportBundle,
        keys: Iterable[str],
        scope: ConfigScope = ConfigScope.USER,
    ) -> InstallResult:
        """
        Install the chosen bundle entries into ``scope`` of the active agent.

        Each entry is installed independently; failures are collected per key.
        """
        adapter = self._active_adapter()
        wanted = set(keys)
        result = InstallResult()

        for tool in bundle.tools:
            if tool.key not in wanted:
                continue
            try:
                self._install_one(adapter, tool, scope)
                result.installed.append(tool.key)
            except Exception as e:
                logger.error(f"Failed to install {tool.key}: {e}")
                result.failed[tool.key] = str(e)

        logger.info(f"Installed {len(result.installed)} bundle tools, {len(result.failed)} failed")
        return result

    def _install_one(self, adapter: PlatformAdapter, tool: ExportedTool, scope: ConfigScope) -> None:
        config = tool.config
        if isinstance(config, McpServerConfig):
            is_valid, error = validate_mcp_server_config(config)
            if not is_valid:
                raise ValueError(error)
            server = McpServerMetadata(
                command=config.command,
                args=list(config.args),
                env=dict(config.env),
                transport=config.transport,
                url=config.url,
                headers=dict(config.headers),
            )
            adapter.install_mcp_server(scope, tool.name, server, enabled=tool.enabled)
            return
        if isinstance(config, HookConfig):
            group = {"matcher": config.matcher, "hooks": [dict(h) for h in config.hooks]}
            adapter.install_hook(scope, config.event_name, group, enabled=tool.enabled)
            return

        if tool.type == ToolType.SKILL:
            adapter.install_skill(scope, tool.name, config.files)
        else:
            adapter.install_command(scope, tool.name, config.files)

        if not tool.enabled:
            placeholder = NormalizedTool(
                id="", type=tool.type, name=tool.name, scope=scope,
                status=ToolStatus.ENABLED, source=ToolSource(file_path=Path()),
            )
            adapter.set_tool_enabled(placeholder, False)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def write_bundle(self, bundle: ProfileExportBundle, path: Path) -> None:
        atomic_write(path, dumps_pretty(bundle.to_dict()))
        logger.info(f"Bundle written: {path}")

    def read_bundle(self, path: Path, agent_id: Optional[str] = None) -> BundleValidation:
        """Read and validate a bundle file; unreadable files give an invalid result."""
        content = self.file_io.read_text_file(path)
        if content is None:
            return BundleValidation(valid=False, error=f"File not found: {path}")
        try:
            data: Dict[str, Any] = json.loads(content)
        except json.JSONDecodeError as e:
            return BundleValidation(valid=False, error=f"{ERROR_MESSAGES['BUNDLE_INVALID']} ({e})")
        return self.validate_import_bundle(data, agent_id)
