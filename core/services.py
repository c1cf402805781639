"""Wires toolkeeper's components together.

The config manager and the adapters need each other: adapters write through
the config manager, and the config manager reads through the active
adapter. The registry is created empty, handed to the config manager, and
filled with adapters afterwards.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from adapters.claude_code.adapter import ClaudeCodeAdapter
from adapters.codex.adapter import CodexAdapter
from adapters.copilot.adapter import CopilotAdapter
from core.adapter_registry import AdapterRegistry
from core.agent_switcher import AgentSwitcher
from core.backup_manager import BackupManager
from core.config_manager import ConfigManager
from core.file_io import FileIO
from core.profile_bundle import ProfileBundleService
from core.profile_manager import ProfileManager
from core.schema_registry import SchemaRegistry
from core.state_store import StateStore
from core.store_schemas import STORE_SCHEMAS
from core.tool_manager import ToolManager
from core.workspace_profile_manager import WorkspaceProfileManager

logger = logging.getLogger(__name__)

ADAPTER_CLASSES = (ClaudeCodeAdapter, CodexAdapter, CopilotAdapter)


@dataclass
class Services:
    schemas: SchemaRegistry
    registry: AdapterRegistry
    config: ConfigManager
    tools: ToolManager
    store: StateStore
    profiles: ProfileManager
    bundles: ProfileBundleService
    agents: AgentSwitcher
    workspaces: WorkspaceProfileManager


def build_services(
    home: Optional[Path] = None,
    workspace_root: Optional[Path] = None,
    state_file: Optional[Path] = None,
    backup_root: Optional[Path] = None,
    managed_dir: Optional[Path] = None,
) -> Services:
    """
    Create every component with shared registries.

    Args:
        home: Home directory adapters resolve user-scope paths against
        workspace_root: Workspace for project and local scopes
        state_file: Override for toolkeeper's own state file
        backup_root: Where removed tool directories are copied to
        managed_dir: Override for the organization-managed Claude Code directory

    Returns:
        Services with no agent activated yet
    """
    schemas = SchemaRegistry()
    for adapter_class in ADAPTER_CLASSES:
        schemas.register_schemas(adapter_class.get_schemas())
    schemas.register_schemas(STORE_SCHEMAS)

    file_io = FileIO()
    registry = AdapterRegistry()
    config = ConfigManager(
        registry,
        schemas=schemas,
        file_io=file_io,
        backups=BackupManager(),
        backup_root=backup_root,
    )

    common = dict(file_io=file_io, home=home, workspace_root=workspace_root)
    registry.register(ClaudeCodeAdapter(config, managed_dir=managed_dir, **common))
    registry.register(CodexAdapter(config, **common))
    registry.register(CopilotAdapter(config, **common))

    tools = ToolManager(config, registry)
    store = StateStore(state_file=state_file)
    profiles = ProfileManager(store, config, tools, schemas=schemas)
    bundles = ProfileBundleService(profiles, registry, file_io=file_io, schemas=schemas)
    agents = AgentSwitcher(registry, store)
    workspaces = WorkspaceProfileManager(store, profiles, file_io=file_io)

    logger.debug(f"Services built with adapters: {[a.id for a in registry.get_all_adapters()]}")
    return Services(
        schemas=schemas,
        registry=registry,
        config=config,
        tools=tools,
        store=store,
        profiles=profiles,
        bundles=bundles,
        agents=agents,
        workspaces=workspaces,
    )
