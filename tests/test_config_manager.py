"""Unit tests for ConfigManager."""

import pytest
import tomlkit

from core.errors import ConfigReadError, ConfigValidationError
from core.file_io import ReadStatus
from models.enums import ConfigScope, ToolStatus, ToolType
from tests.helpers import read_json, write_json, write_skill
from utils.tool_key import canonical_key


@pytest.fixture
def config(services, claude):
    return services.config


class TestReadConfigFile:
    """Schema-checked reads."""

    def test_valid_file(self, config, home):
        path = write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        result = config.read_config_file(path, "claude-json")
        assert result.ok
        assert result.data["mcpServers"]["gh"]["command"] == "npx"

    def test_missing_file(self, config, home):
        assert config.read_config_file(home / ".claude.json", "claude-json").status == ReadStatus.NOT_FOUND

    def test_schema_failure_is_error(self, config, home):
        path = write_json(home / ".claude.json", {"mcpServers": {"gh": {"args": []}}})
        result = config.read_config_file(path, "claude-json")
        assert result.status == ReadStatus.ERROR
        assert result.error.startswith("Schema validation failed")


class TestWriteConfigFile:
    """Read-modify-write with validation, backups and rollback."""

    def test_creates_missing_file(self, config, tmp_path):
        path = tmp_path / "new" / ".mcp.json"
        written = config.write_config_file(
            path, "mcp-file", lambda doc: doc.setdefault("mcpServers", {}).update(gh={"command": "npx"})
        )
        assert written == {"mcpServers": {"gh": {"command": "npx"}}}
        assert read_json(path) == written

    def test_invalid_result_leaves_bytes_identical(self, config, home):
        path = home / ".claude.json"
        original = '{\n    "mcpServers": {"gh": {"command": "npx"}},\n    "numStartups": 3\n}'
        path.write_text(original)

        def break_it(doc):
            doc["mcpServers"]["gh"] = {"args": ["no command"]}

        with pytest.raises(ConfigValidationError):
            config.write_config_file(path, "claude-json", break_it)

        assert path.read_text() == original
        assert config.list_backups(path) == []

    def test_unreadable_file_is_never_overwritten(self, config, home):
        path = home / ".claude.json"
        path.write_text("{ definitely not json")
        with pytest.raises(ConfigReadError):
            config.write_config_file(path, "claude-json", lambda doc: doc)
        assert path.read_text() == "{ definitely not json"

    def test_unknown_fields_preserved(self, config, home):
        path = write_json(home / ".claude.json", {
            "mcpServers": {"gh": {"command": "npx", "timeout": 30}},
            "oauthAccount": {"email": "dev@example.com"},
            "projects": {"/src": {"history": []}},
        })

        config.write_config_file(path, "claude-json", lambda doc: doc["mcpServers"]["gh"].update(disabled=True))

        data = read_json(path)
        assert data["oauthAccount"] == {"email": "dev@example.com"}
        assert data["projects"] == {"/src": {"history": []}}
        assert data["mcpServers"]["gh"] == {"command": "npx", "timeout": 30, "disabled": True}

    def test_toml_comments_preserved(self, config, home):
        path = home / ".codex" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text(
            '# Codex settings\nmodel = "o3"  # favourite\n\n'
            '[mcp_servers.gh]\ncommand = "npx"\n\n[history]\npersistence = "none"\n'
        )

        def disable(doc):
            doc["mcp_servers"]["gh"]["enabled"] = False

        config.write_config_file(path, "codex-config", disable)

        text = path.read_text()
        assert text.startswith("# Codex settings")
        assert 'model = "o3"  # favourite' in text
        assert "enabled = false" in text
        assert tomlkit.parse(text)["history"]["persistence"] == "none"

    def test_json_comments_dropped_but_kept_in_backup(self, config, home):
        path = home / ".claude.json"
        original = '{\n  // personal servers\n  "mcpServers": {"gh": {"command": "npx",},},\n}\n'
        path.write_text(original)

        config.write_config_file(path, "claude-json", lambda doc: doc["mcpServers"]["gh"].update(disabled=True))

        assert "//" not in path.read_text()
        assert read_json(path) == {"mcpServers": {"gh": {"command": "npx", "disabled": True}}}
        assert config.list_backups(path)[0].read_text() == original

    def test_write_takes_backup(self, config, home):
        path = write_json(home / ".claude.json", {"mcpServers": {}})
        config.write_config_file(path, "claude-json", lambda doc: doc.update(numStartups=1))
        backups = config.list_backups(path)
        assert len(backups) == 1
        assert read_json(backups[0]) == {"mcpServers": {}}

    def test_failed_verification_rolls_back(self, config, home, monkeypatch):
        path = write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        before = path.read_bytes()

        def corrupt_write(target, data):
            target.write_text("{ truncated")

        monkeypatch.setattr(config.file_io, "write_config", corrupt_write)
        with pytest.raises(ConfigReadError):
            config.write_config_file(path, "claude-json", lambda doc: doc.update(numStartups=2))

        assert path.read_bytes() == before

    def test_restore_backup(self, config, home):
        path = write_json(home / ".claude.json", {"mcpServers": {}, "n": 1})
        config.write_config_file(path, "claude-json", lambda doc: doc.update(n=2))

        assert config.restore_backup(path, 1) is True
        assert read_json(path)["n"] == 1
        assert config.restore_backup(path, 4) is False


class TestFileMutations:
    def test_rename_refuses_existing_target(self, config, tmp_path):
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "a.md.disabled").write_text("b")
        with pytest.raises(FileExistsError):
            config.rename_path(tmp_path / "a.md", tmp_path / "a.md.disabled")

    def test_remove_directory_keeps_copy(self, config, home, tmp_path):
        skill_dir = write_skill(home / ".claude" / "skills", "review")
        config.remove_path(skill_dir)
        assert not skill_dir.exists()
        assert [p.name.startswith("review-") for p in (tmp_path / "backups").iterdir()] == [True]


class TestReadAllTools:
    """Multi-scope reads with precedence resolution."""

    def test_project_wins_over_user(self, config, home, workspace):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "user-gh"}}})
        write_json(workspace / ".mcp.json", {"mcpServers": {"gh": {"command": "project-gh", "disabled": True}}})

        tools = config.read_all_tools(ToolType.MCP_SERVER)

        assert len(tools) == 1
        winner = tools[0]
        assert winner.scope == ConfigScope.PROJECT
        assert winner.status == ToolStatus.DISABLED
        assert [(e.scope, e.is_active) for e in winner.scope_entries] == [
            (ConfigScope.PROJECT, True), (ConfigScope.USER, False),
        ]

    def test_managed_wins_over_everything(self, config, home, workspace, tmp_path):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "a"}}})
        write_json(workspace / ".mcp.json", {"mcpServers": {"gh": {"command": "b"}}})
        write_json(tmp_path / "managed" / "managed-mcp.json", {"mcpServers": {"gh": {"command": "c"}}})

        winner = config.read_all_tools(ToolType.MCP_SERVER)[0]
        assert winner.is_managed
        assert len(winner.scope_entries) == 3

    def test_error_in_one_scope_keeps_others(self, config, home, workspace, monkeypatch):
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        adapter = config.registry.get_active_adapter()
        original = adapter.read_tools

        def flaky(tool_type, scope):
            if scope == ConfigScope.PROJECT:
                raise PermissionError("denied")
            return original(tool_type, scope)

        monkeypatch.setattr(adapter, "read_tools", flaky)
        tools = config.read_all_tools(ToolType.MCP_SERVER)

        by_status = {t.status: t for t in tools}
        assert by_status[ToolStatus.ENABLED].name == "gh"
        error = by_status[ToolStatus.ERROR]
        assert error.id == "mcp_server:project:error"
        assert "denied" in error.status_detail

    def test_parse_error_becomes_error_tool(self, config, workspace, home):
        (workspace / ".mcp.json").write_text("{ nope")
        write_json(home / ".claude.json", {"mcpServers": {"gh": {"command": "npx"}}})
        tools = config.read_all_tools(ToolType.MCP_SERVER)
        assert sorted(t.status.value for t in tools) == ["enabled", "error"]

    def test_no_active_adapter(self, services):
        assert services.config.read_all_tools(ToolType.SKILL) == []

    def test_skills_resolved_by_name(self, config, home, workspace):
        write_skill(home / ".claude" / "skills", "review")
        write_skill(workspace / ".claude" / "skills", "review")
        tools = config.read_all_tools(ToolType.SKILL)
        assert [canonical_key(t) for t in tools] == ["skill:review"]
        assert tools[0].scope == ConfigScope.PROJECT
