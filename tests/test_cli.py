"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from main import cli
from tests.helpers import read_json, write_json, write_skill


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, services):
    def _invoke(*args, **kwargs):
        return runner.invoke(cli, list(args), obj=services, catch_exceptions=False, **kwargs)
    return _invoke


@pytest.fixture
def environment(home):
    write_json(home / ".claude.json", {"mcpServers": {
        "github": {"command": "gh-mcp"},
        "postgres": {"command": "pg-mcp", "disabled": True},
    }})
    write_skill(home / ".claude" / "skills", "review")
    return home


class TestAgents:
    def test_list_marks_active(self, invoke):
        result = invoke("--agent", "codex", "agents")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert any(line.startswith("* codex") for line in lines)
        assert len(lines) == 3

    def test_unknown_agent(self, invoke):
        result = invoke("--agent", "cursor", "agents")
        assert result.exit_code == 2
        assert "Unknown agent: cursor" in result.output

    def test_tools_without_agent(self, invoke):
        result = invoke("tools")
        assert result.exit_code == 1
        assert "No active agent" in result.output

    def test_agent_choice_is_remembered(self, invoke, environment):
        invoke("--agent", "claude-code", "agents")
        result = invoke("tools")
        assert "mcp_server:github" in result.output


class TestTools:
    def test_list(self, invoke, environment):
        result = invoke("--agent", "claude-code", "tools")
        assert result.exit_code == 0
        assert "enabled   user     mcp_server:github" in result.output
        assert "disabled  user     mcp_server:postgres" in result.output
        assert "skill:review" in result.output

    def test_list_by_type_with_actions(self, invoke, environment):
        result = invoke("--agent", "claude-code", "tools", "--type", "skill", "--actions")
        assert "mcp_server" not in result.output
        assert "actions: toggle, delete, move; move to: project" in result.output

    def test_empty(self, invoke):
        assert invoke("--agent", "codex", "tools").output == "No tools found.\n"

    def test_toggle(self, invoke, environment):
        result = invoke("--agent", "claude-code", "toggle", "mcp_server:github")
        assert result.output == "mcp_server:github disabled\n"
        assert read_json(environment / ".claude.json")["mcpServers"]["github"]["disabled"] is True

        again = invoke("toggle", "mcp_server:github", "--disable")
        assert again.output == "mcp_server:github already disabled\n"

    def test_toggle_syncs_active_profile(self, invoke, services, environment):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        invoke("profile", "switch", "Work")

        invoke("toggle", "skill:review", "--disable")

        profile = services.profiles.find_profile_by_name("Work")
        assert profile.entry_for("skill:review").enabled is False

    def test_toggle_unknown_key(self, invoke, environment):
        result = invoke("--agent", "claude-code", "toggle", "skill:nope")
        assert result.exit_code == 1
        assert "No tool with key 'skill:nope'" in result.output

    def test_delete_needs_confirmation(self, invoke, environment):
        result = invoke("--agent", "claude-code", "delete", "skill:review", input="n\n")
        assert result.exit_code == 1
        assert (environment / ".claude" / "skills" / "review").exists()

        result = invoke("delete", "skill:review", "--yes")
        assert result.output == "Deleted skill:review\n"
        assert not (environment / ".claude" / "skills" / "review").exists()

    def test_move(self, invoke, environment, workspace):
        result = invoke("--agent", "claude-code", "move", "mcp_server:github", "project")
        assert result.exit_code == 0
        assert "github" in read_json(workspace / ".mcp.json")["mcpServers"]

    def test_move_to_managed_fails(self, invoke, environment):
        result = invoke("--agent", "claude-code", "move", "mcp_server:github", "managed")
        assert result.exit_code == 1
        assert "Cannot move to managed scope" in result.output


class TestProfiles:
    def test_create_list_switch(self, invoke, environment):
        assert invoke("--agent", "claude-code", "profile", "create", "Work").output == \
            "Created profile 'Work' with 3 tools\n"
        invoke("toggle", "mcp_server:postgres", "--enable")

        result = invoke("profile", "switch", "Work")
        assert result.output == "Toggled 1, skipped 0, failed 0\n"

        listing = invoke("profile", "list").output
        assert "* Work  (2/3 enabled)" in listing

    def test_switch_none(self, invoke, services, environment):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        invoke("profile", "switch", "Work")
        assert invoke("profile", "switch", "--none").exit_code == 0
        assert services.profiles.get_active_profile_id() is None

    def test_switch_needs_name(self, invoke):
        result = invoke("--agent", "claude-code", "profile", "switch")
        assert result.exit_code == 2

    def test_unknown_profile(self, invoke):
        result = invoke("--agent", "claude-code", "profile", "delete", "Nope")
        assert result.exit_code == 1
        assert "Profile not found: Nope" in result.output

    def test_reconcile(self, invoke, environment):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        invoke("delete", "mcp_server:postgres", "--yes")
        assert invoke("profile", "reconcile", "Work").output == "2 valid, 1 removed\n"

    def test_export_import_roundtrip(self, invoke, services, environment, tmp_path):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        bundle_path = tmp_path / "work.tkprofile"

        result = invoke("profile", "export", "Work", "-o", str(bundle_path))
        assert result.output == f"Exported 3 tools to {bundle_path}\n"

        result = invoke("profile", "import", str(bundle_path))
        assert "3 matching, 0 conflicting, 0 missing" in result.output
        assert "Imported profile 'Work (imported)'" in result.output

    def test_import_converts_and_installs(self, invoke, services, environment, tmp_path, workspace):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        bundle_path = tmp_path / "work.tkprofile"
        invoke("profile", "export", "Work", "-o", str(bundle_path))

        result = invoke("--agent", "copilot", "profile", "import", str(bundle_path),
                        "--install", "--scope", "project", "--name", "Shared")

        assert "Converted from claude-code: kept 3, dropped 0" in result.output
        assert "0 matching, 0 conflicting, 3 missing" in result.output
        assert "Installed 3 tools" in result.output
        assert (workspace / ".github" / "agents" / "review.agent.md").exists()
        servers = read_json(workspace / ".vscode" / "mcp.json")
        assert "github" in servers["servers"]
        assert "postgres" in servers["_disabledServers"]

    def test_import_invalid_bundle(self, invoke, tmp_path):
        path = tmp_path / "bad.tkprofile"
        path.write_text('{"bundleType": "other"}', encoding="utf-8")
        result = invoke("--agent", "claude-code", "profile", "import", str(path))
        assert result.exit_code == 1
        assert "not a valid toolkeeper profile bundle" in result.output


class TestWorkspace:
    def test_set_status_clear(self, invoke, environment, workspace):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        assert invoke("workspace", "status").output == "none\n"

        invoke("workspace", "set", "Work")
        assert invoke("workspace", "status").output == "mismatched (expects 'Work')\n"

        invoke("profile", "switch", "Work")
        assert invoke("workspace", "status").output == "matched (expects 'Work')\n"

        assert invoke("workspace", "clear").output == "Workspace association removed\n"
        assert not (workspace / ".toolkeeper" / "profile.json").exists()

    def test_switching_away_records_override(self, invoke, services, environment, workspace):
        invoke("--agent", "claude-code", "profile", "create", "Work")
        invoke("profile", "create", "Home")
        invoke("workspace", "set", "Work")

        invoke("profile", "switch", "Home")
        assert invoke("workspace", "status").output == "overridden (expects 'Work')\n"

        invoke("profile", "switch", "Work")
        assert invoke("workspace", "status").output == "matched (expects 'Work')\n"

    def test_invalid_workspace_option(self, invoke, tmp_path):
        result = invoke("--workspace", str(tmp_path / "missing"), "agents")
        assert result.exit_code == 2
