"""toolkeeper - Main entry point.

Command-line surface over the tool manager and the profile engine.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import click

from core.profile_bundle import bundle_file_name
from core.services import Services, build_services
from core.tool_manager import get_available_actions, get_move_targets
from models.enums import ALL_TOOL_TYPES, ConfigScope, ToolStatus, ToolType
from models.profile import Profile
from models.tool import NormalizedTool
from utils.constants import APP_VERSION, ERROR_MESSAGES
from utils.logger import set_console_level, setup_logging
from utils.tool_key import canonical_key
from utils.validators import validate_workspace_root

logger = logging.getLogger(__name__)


def _services(ctx: click.Context) -> Services:
    return ctx.find_root().obj


def _require_agent(services: Services):
    adapter = services.registry.get_active_adapter()
    if adapter is None:
        raise click.ClickException(ERROR_MESSAGES["NO_ACTIVE_AGENT"])
    return adapter


def _all_tools(services: Services, tool_types=ALL_TOOL_TYPES) -> List[NormalizedTool]:
    tools: List[NormalizedTool] = []
    for tool_type in tool_types:
        tools.extend(services.config.read_all_tools(tool_type))
    return tools


def _find_tool(services: Services, key: str) -> NormalizedTool:
    _require_agent(services)
    for tool in _all_tools(services):
        if tool.status != ToolStatus.ERROR and canonical_key(tool) == key:
            return tool
    raise click.ClickException(f"No tool with key '{key}'")


def _find_profile(services: Services, name: str) -> Profile:
    profile = services.profiles.find_profile_by_name(name) or services.profiles.get_profile(name)
    if profile is None:
        raise click.ClickException(f"{ERROR_MESSAGES['PROFILE_NOT_FOUND']}: {name}")
    return profile


@click.group()
@click.version_option(version=APP_VERSION, prog_name="toolkeeper")
@click.option("--agent", "agent_id", default=None, help="Agent to operate on (claude-code, codex, copilot).")
@click.option("--workspace", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Workspace root for project and local scopes.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
def cli(ctx: click.Context, agent_id: Optional[str], workspace: Optional[Path], verbose: bool) -> None:
    """toolkeeper: manage agent skills, MCP servers, hooks and commands."""
    if verbose:
        set_console_level(logging.DEBUG)

    if workspace is not None:
        is_valid, error = validate_workspace_root(str(workspace))
        if not is_valid:
            raise click.BadParameter(error, param_hint="--workspace")
        workspace = workspace.resolve()

    services = ctx.obj
    if services is None:
        services = build_services(workspace_root=workspace)
        ctx.obj = services
    elif workspace is not None:
        services.registry.set_workspace_root(workspace)

    if agent_id:
        try:
            services.agents.switch_agent(agent_id)
        except KeyError:
            raise click.BadParameter(ERROR_MESSAGES["UNKNOWN_AGENT"].format(agent_id=agent_id), param_hint="--agent")
    else:
        services.agents.restore()


# ----------------------------------------------------------------------
# Agents and tools
# ----------------------------------------------------------------------

@cli.command("agents")
@click.pass_context
def agents_command(ctx: click.Context) -> None:
    """List known agents; the active one is marked with '*'."""
    services = _services(ctx)
    active_id = services.registry.active_id
    for adapter in services.registry.get_all_adapters():
        marker = "*" if adapter.id == active_id else " "
        try:
            detected = "detected" if adapter.detect() else "not found"
        except OSError:
            detected = "unknown"
        click.echo(f"{marker} {adapter.id:<12} {adapter.display_name:<16} {detected}")


@cli.command("tools")
@click.option("--type", "tool_type", type=click.Choice([t.value for t in ALL_TOOL_TYPES]), default=None,
              help="Only list tools of this type.")
@click.option("--actions", is_flag=True, help="Show the actions and move targets of each tool.")
@click.pass_context
def tools_command(ctx: click.Context, tool_type: Optional[str], actions: bool) -> None:
    """List the active agent's tools after scope resolution."""
    services = _services(ctx)
    adapter = _require_agent(services)
    types = [ToolType(tool_type)] if tool_type else ALL_TOOL_TYPES

    tools = _all_tools(services, types)
    if not tools:
        click.echo("No tools found.")
        return

    for tool in tools:
        key = canonical_key(tool) if tool.status != ToolStatus.ERROR else tool.id
        line = f"{tool.status.value:<9} {tool.scope.value:<8} {key}"
        if tool.status_detail:
            line += f"  ({tool.status_detail})"
        click.echo(line)
        if actions:
            targets = ", ".join(s.value for s in get_move_targets(tool, adapter)) or "-"
            click.echo(f"          actions: {', '.join(get_available_actions(tool)) or '-'}; move to: {targets}")


@cli.command("toggle")
@click.argument("key")
@click.option("--enable/--disable", "enabled", default=None, help="Set a state instead of flipping it.")
@click.pass_context
def toggle_command(ctx: click.Context, key: str, enabled: Optional[bool]) -> None:
    """Enable or disable one tool by canonical key (e.g. mcp_server:github)."""
    services = _services(ctx)
    tool = _find_tool(services, key)
    target = (not tool.is_enabled) if enabled is None else enabled

    result = services.tools.set_tool_enabled(tool, target)
    if not result.success:
        raise click.ClickException(result.error or "Toggle failed")

    services.profiles.sync_tool_to_active_profile(key, target)
    state = "enabled" if target else "disabled"
    click.echo(f"{key} {state}" if result.changed else f"{key} already {state}")


@cli.command("delete")
@click.argument("key")
@click.confirmation_option(prompt="Delete this tool?")
@click.pass_context
def delete_command(ctx: click.Context, key: str) -> None:
    """Delete one tool (a backup copy is kept)."""
    services = _services(ctx)
    tool = _find_tool(services, key)
    result = services.tools.delete_tool(tool)
    if not result.success:
        raise click.ClickException(result.error or "Delete failed")
    services.profiles.remove_tool_from_active_profile(key)
    click.echo(f"Deleted {key}")


@cli.command("move")
@click.argument("key")
@click.argument("scope", type=click.Choice([s.value for s in ConfigScope]))
@click.pass_context
def move_command(ctx: click.Context, key: str, scope: str) -> None:
    """Move one tool to another scope."""
    services = _services(ctx)
    tool = _find_tool(services, key)
    target = ConfigScope(scope)
    if services.tools.check_conflict(tool, target):
        click.echo(f"Warning: {tool.name} already exists in {scope} scope and will be replaced", err=True)

    result = services.tools.move_tool(tool, target)
    if not result.success:
        raise click.ClickException(result.error or "Move failed")
    click.echo(f"Moved {key} to {scope} scope")


# ----------------------------------------------------------------------
# Profiles
# ----------------------------------------------------------------------

@cli.group("profile")
def profile_group() -> None:
    """Create, switch and share tool profiles."""


@profile_group.command("create")
@click.argument("name")
@click.pass_context
def profile_create(ctx: click.Context, name: str) -> None:
    """Snapshot the current tool states as a new profile."""
    services = _services(ctx)
    _require_agent(services)
    success, error, profile = services.profiles.create_profile(name)
    if not success:
        raise click.ClickException(error)
    click.echo(f"Created profile '{profile.name}' with {len(profile.tools)} tools")


@profile_group.command("list")
@click.pass_context
def profile_list(ctx: click.Context) -> None:
    services = _services(ctx)
    active_id = services.profiles.get_active_profile_id()
    profiles = services.profiles.list_profiles()
    if not profiles:
        click.echo("No profiles.")
        return
    for profile in profiles:
        marker = "*" if profile.id == active_id else " "
        enabled = sum(1 for entry in profile.tools if entry.enabled)
        click.echo(f"{marker} {profile.name}  ({enabled}/{len(profile.tools)} enabled)")


@profile_group.command("switch")
@click.argument("name", required=False)
@click.option("--none", "deactivate", is_flag=True, help="Deactivate the current profile.")
@click.pass_context
def profile_switch(ctx: click.Context, name: Optional[str], deactivate: bool) -> None:
    """Bring every tool to the states stored in a profile."""
    services = _services(ctx)
    if not deactivate and not name:
        raise click.UsageError("Give a profile name or --none")

    if deactivate:
        result = services.profiles.switch_profile(None)
    else:
        _require_agent(services)
        profile = _find_profile(services, name)
        result = services.profiles.switch_profile(profile.id)
        root = services.registry.get_active_adapter().workspace_root
        expected = services.workspaces.get_association(root) if root is not None else None
        if expected == profile.name:
            services.workspaces.clear_override(root)
        elif expected is not None:
            services.workspaces.set_override(root, profile.name)

    click.echo(f"Toggled {result.toggled}, skipped {result.skipped}, failed {result.failed}")
    for error in result.errors:
        click.echo(f"  {error}", err=True)
    if not result.success:
        ctx.exit(1)


@profile_group.command("delete")
@click.argument("name")
@click.pass_context
def profile_delete(ctx: click.Context, name: str) -> None:
    services = _services(ctx)
    profile = _find_profile(services, name)
    success, error = services.profiles.delete_profile(profile.id)
    if not success:
        raise click.ClickException(error)
    click.echo(f"Deleted profile '{profile.name}'")


@profile_group.command("reconcile")
@click.argument("name")
@click.pass_context
def profile_reconcile(ctx: click.Context, name: str) -> None:
    """Drop profile entries whose tools no longer exist."""
    services = _services(ctx)
    _require_agent(services)
    profile = _find_profile(services, name)
    result = services.profiles.reconcile_profile(profile.id)
    message = f"{result.valid} valid, {result.removed} removed"
    if result.unverified:
        message += f", {result.unverified} kept (config unreadable)"
    click.echo(message)


@profile_group.command("export")
@click.argument("name")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Bundle file to write.")
@click.pass_context
def profile_export(ctx: click.Context, name: str, output: Optional[Path]) -> None:
    """Write a self-contained profile bundle."""
    services = _services(ctx)
    adapter = _require_agent(services)
    profile = _find_profile(services, name)
    bundle = services.bundles.export_profile(profile.id)
    if bundle is None:
        raise click.ClickException(ERROR_MESSAGES["PROFILE_NOT_FOUND"])

    output = output or Path.cwd() / bundle_file_name(profile.name, adapter.id)
    services.bundles.write_bundle(bundle, output)
    click.echo(f"Exported {len(bundle.tools)} tools to {output}")


@profile_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", default=None, help="Name for the imported profile.")
@click.option("--overwrite", is_flag=True, help="Replace a profile with the same name.")
@click.option("--install", "install_missing", is_flag=True, help="Install tools that are missing locally.")
@click.option("--scope", type=click.Choice([ConfigScope.USER.value, ConfigScope.PROJECT.value]),
              default=ConfigScope.USER.value, help="Scope for installed tools.")
@click.pass_context
def profile_import(
    ctx: click.Context,
    path: Path,
    name: Optional[str],
    overwrite: bool,
    install_missing: bool,
    scope: str,
) -> None:
    """Create a profile from a bundle file."""
    services = _services(ctx)
    adapter = _require_agent(services)

    validation = services.bundles.read_bundle(path, adapter.id)
    if not validation.valid:
        raise click.ClickException(validation.error)

    bundle = validation.bundle
    if validation.requires_conversion:
        conversion = services.bundles.convert_bundle_for_agent(bundle, adapter)
        bundle = conversion.bundle
        click.echo(f"Converted from {validation.bundle.agent_id}: kept {conversion.kept}, dropped {conversion.dropped}")

    analysis = services.bundles.analyze_import(bundle)
    click.echo(
        f"{len(analysis.matching)} matching, {len(analysis.conflicts)} conflicting, "
        f"{len(analysis.missing)} missing"
    )

    if install_missing and analysis.missing:
        result = services.bundles.install_bundle_tools(
            bundle, [tool.key for tool in analysis.missing], ConfigScope(scope)
        )
        click.echo(f"Installed {len(result.installed)} tools")
        for key, error in result.failed.items():
            click.echo(f"  {key}: {error}", err=True)

    success, error, profile = services.bundles.import_profile(bundle, name=name, overwrite=overwrite)
    if not success:
        raise click.ClickException(error)
    click.echo(f"Imported profile '{profile.name}'")


# ----------------------------------------------------------------------
# Workspace association
# ----------------------------------------------------------------------

@cli.group("workspace")
def workspace_group() -> None:
    """Associate the workspace with the profile it expects."""


def _require_workspace(services: Services) -> Path:
    adapter = _require_agent(services)
    if adapter.workspace_root is None:
        raise click.UsageError("No workspace given; pass --workspace")
    return adapter.workspace_root


@workspace_group.command("status")
@click.pass_context
def workspace_status(ctx: click.Context) -> None:
    services = _services(ctx)
    root = _require_workspace(services)
    expected = services.workspaces.get_association(root)
    status = services.workspaces.get_status(root)
    click.echo(f"{status.value}" + (f" (expects '{expected}')" if expected else ""))


@workspace_group.command("set")
@click.argument("name")
@click.pass_context
def workspace_set(ctx: click.Context, name: str) -> None:
    services = _services(ctx)
    root = _require_workspace(services)
    profile = _find_profile(services, name)
    success, error = services.workspaces.set_association(root, profile.name)
    if not success:
        raise click.ClickException(error)
    click.echo(f"Workspace now expects '{profile.name}'")


@workspace_group.command("clear")
@click.pass_context
def workspace_clear(ctx: click.Context) -> None:
    services = _services(ctx)
    root = _require_workspace(services)
    success, error = services.workspaces.remove_association(root)
    if not success:
        raise click.ClickException(error)
    click.echo("Workspace association removed")


def main():
    """Main entry point for toolkeeper."""
    setup_logging()
    try:
        cli(prog_name="toolkeeper")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
