"""Tests for single-tool actions."""

from pathlib import Path

import pytest

from core.tool_manager import (
    ACTION_DELETE,
    ACTION_MOVE,
    ACTION_TOGGLE,
    describe_deletion,
    get_available_actions,
    get_move_targets,
)
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import NormalizedTool, ToolSource
from tests.helpers import read_json, write_json, write_skill


def make_tool(scope=ConfigScope.USER, status=ToolStatus.ENABLED, tool_type=ToolType.MCP_SERVER):
    return NormalizedTool(
        id=f"{tool_type.value}:{scope.value}:x",
        type=tool_type,
        name="x",
        scope=scope,
        status=status,
        source=ToolSource(file_path=Path("/tmp/x.json")),
    )


def read_one(services, tool_type, name):
    return next(t for t in services.config.read_all_tools(tool_type) if t.name == name)


class TestActionRules:
    def test_managed_tools_have_no_actions(self):
        tool = make_tool(scope=ConfigScope.MANAGED)
        assert get_available_actions(tool) == []
        assert get_move_targets(tool) == []

    def test_error_tools_can_only_be_deleted(self):
        assert get_available_actions(make_tool(status=ToolStatus.ERROR)) == [ACTION_DELETE]

    def test_regular_tool_actions(self):
        assert get_available_actions(make_tool()) == [ACTION_TOGGLE, ACTION_DELETE, ACTION_MOVE]
        assert get_move_targets(make_tool()) == [ConfigScope.PROJECT]
        assert get_move_targets(make_tool(scope=ConfigScope.PROJECT)) == [ConfigScope.USER]

    def test_describe_deletion(self):
        assert describe_deletion(make_tool()) == "Remove MCP server 'x' from /tmp/x.json"


class TestToolManager:
    def test_managed_tools_are_refused(self, services, claude):
        tool = make_tool(scope=ConfigScope.MANAGED)
        for result in (
            services.tools.toggle_tool(tool),
            services.tools.set_tool_enabled(tool, False),
            services.tools.delete_tool(tool),
            services.tools.move_tool(tool, ConfigScope.USER),
        ):
            assert result.success is False
            assert result.error == "Cannot modify managed tools"

    def test_set_enabled_reports_change(self, services, claude, home):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        gh = read_one(services, ToolType.MCP_SERVER, "gh")

        first = services.tools.set_tool_enabled(gh, False)
        second = services.tools.set_tool_enabled(gh, False)

        assert first.success and first.changed
        assert second.success and not second.changed

    def test_adapter_failure_becomes_result(self, services, claude, home):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        gh = read_one(services, ToolType.MCP_SERVER, "gh")
        (home / ".claude.json").unlink()

        result = services.tools.toggle_tool(gh)

        assert result.success is False
        assert "no longer exists" in result.error

    def test_no_active_agent(self, services):
        result = services.tools.set_tool_enabled(make_tool(), True)
        assert result.success is False
        assert result.error == "No active agent. Select one with --agent."

    def test_delete(self, services, claude, home):
        path = write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}, "numStartups": 3})
        result = services.tools.delete_tool(read_one(services, ToolType.MCP_SERVER, "gh"))

        assert result.success
        assert read_json(path) == {"mcpServers": {}, "numStartups": 3}

    def test_move_to_project(self, services, claude, home, workspace):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx", "disabled": True}}})
        gh = read_one(services, ToolType.MCP_SERVER, "gh")

        assert services.tools.check_conflict(gh, ConfigScope.PROJECT) is False
        result = services.tools.move_tool(gh, ConfigScope.PROJECT)

        assert result.success
        assert read_json(home / ".claude.json")["mcpServers"] == {}
        assert read_json(workspace / ".mcp.json")["mcpServers"]["gh"] == {"command": "npx", "args": [], "disabled": True}

    def test_move_skill_and_conflict(self, services, claude, home, workspace):
        write_skill(home / ".claude" / "skills", "review")
        write_skill(workspace / ".claude" / "skills", "review", description="Project copy")
        review = next(t for t in services.config.read_tools_by_scope(ToolType.SKILL, ConfigScope.USER))

        assert services.tools.check_conflict(review, ConfigScope.PROJECT) is True

        result = services.tools.move_tool(review, ConfigScope.PROJECT)
        assert result.success
        assert not (home / ".claude" / "skills" / "review").exists()
        assert "A skill" in (workspace / ".claude" / "skills" / "review" / "SKILL.md").read_text()

    @pytest.mark.parametrize("target,message", [
        (ConfigScope.USER, "Tool is already in user scope"),
        (ConfigScope.MANAGED, "Cannot move to managed scope (read-only)"),
    ])
    def test_invalid_move_targets(self, services, claude, target, message):
        result = services.tools.move_tool(make_tool(), target)
        assert result.success is False
        assert result.error == message
