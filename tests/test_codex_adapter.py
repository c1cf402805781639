"""Tests for the Codex adapter (TOML config, skills and prompts)."""

import pytest
import tomlkit

from adapters.errors import AdapterError, AdapterScopeError
from models.bundle import ExportedFile
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import McpServerMetadata
from tests.helpers import write_command, write_skill

CONFIG = """\
# personal settings
model = "o4-mini"

[mcp_servers.docs]
command = "npx"
args = ["-y", "docs-mcp"]

[mcp_servers.search]
url = "https://search.example.com/mcp"
enabled = false
"""


@pytest.fixture
def config_path(codex, home):
    path = home / ".codex" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text(CONFIG, encoding="utf-8")
    return path


def servers(codex, scope=ConfigScope.USER):
    return {t.name: t for t in codex.read_tools(ToolType.MCP_SERVER, scope)}


def load(path):
    return tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()


class TestRead:
    def test_enabled_flag(self, codex, config_path):
        found = servers(codex)
        assert found["docs"].status == ToolStatus.ENABLED
        assert found["docs"].metadata.transport == "stdio"
        assert found["search"].status == ToolStatus.DISABLED
        assert found["search"].metadata.transport == "http"

    def test_invalid_config_becomes_error_tool(self, codex, home):
        path = home / ".codex" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("[mcp_servers.broken]\nargs = []\n", encoding="utf-8")

        tools = codex.read_tools(ToolType.MCP_SERVER, ConfigScope.USER)

        assert len(tools) == 1
        assert tools[0].status == ToolStatus.ERROR
        assert tools[0].name == "MCP Config Error"

    def test_no_hooks_or_local_scope(self, codex, config_path):
        assert codex.read_tools(ToolType.HOOK, ConfigScope.USER) == []
        assert codex.read_tools(ToolType.MCP_SERVER, ConfigScope.LOCAL) == []

    def test_skills_and_prompts(self, codex, home):
        write_skill(home / ".codex" / "skills", "triage")
        write_command(home / ".codex" / "prompts", "release.md")
        write_command(home / ".codex" / "prompts", "nested/ignored.md")

        assert [t.name for t in codex.read_tools(ToolType.SKILL, ConfigScope.USER)] == ["triage"]
        assert [t.name for t in codex.read_tools(ToolType.COMMAND, ConfigScope.USER)] == ["release"]

    def test_detect(self, codex, home):
        assert codex.detect() is False
        (home / ".codex").mkdir()
        assert codex.detect() is True


class TestWrite:
    def test_disable_writes_enabled_false(self, codex, config_path):
        assert codex.set_tool_enabled(servers(codex)["docs"], False) is True

        text = config_path.read_text(encoding="utf-8")
        assert text.startswith("# personal settings")
        assert load(config_path)["mcp_servers"]["docs"]["enabled"] is False

    def test_enable_removes_key(self, codex, config_path):
        codex.set_tool_enabled(servers(codex)["search"], True)
        assert "enabled" not in load(config_path)["mcp_servers"]["search"]
        assert servers(codex)["search"].is_enabled

    def test_delete_last_server_drops_table(self, codex, config_path):
        found = servers(codex)
        codex.remove_tool(found["docs"])
        codex.remove_tool(found["search"])

        data = load(config_path)
        assert "mcp_servers" not in data
        assert data["model"] == "o4-mini"

    def test_install_into_missing_file(self, codex, home):
        server = McpServerMetadata(command="uvx", args=["git-mcp"], env={"TOKEN": "x"})
        codex.install_mcp_server(ConfigScope.USER, "git", server, enabled=False)

        entry = load(home / ".codex" / "config.toml")["mcp_servers"]["git"]
        assert entry == {"command": "uvx", "args": ["git-mcp"], "env": {"TOKEN": "x"}, "enabled": False}

    def test_server_tool_allow_and_deny(self, codex, config_path):
        docs = servers(codex)["docs"]

        codex.set_server_tool_enabled(docs, "search_docs", False)
        assert load(config_path)["mcp_servers"]["docs"]["disabled_tools"] == ["search_docs"]

        codex.set_server_tool_enabled(docs, "search_docs", True)
        assert "disabled_tools" not in load(config_path)["mcp_servers"]["docs"]

    def test_env_vars(self, codex, config_path):
        docs = servers(codex)["docs"]
        codex.set_env_var(docs, "API_KEY", "abc")
        assert load(config_path)["mcp_servers"]["docs"]["env"] == {"API_KEY": "abc"}

        codex.remove_env_var(docs, "API_KEY")
        assert "env" not in load(config_path)["mcp_servers"]["docs"]

    def test_server_operations_reject_other_types(self, codex, home):
        write_skill(home / ".codex" / "skills", "triage")
        skill = codex.read_tools(ToolType.SKILL, ConfigScope.USER)[0]
        with pytest.raises(AdapterError):
            codex.set_env_var(skill, "A", "b")

    def test_hooks_are_unsupported(self, codex):
        with pytest.raises(AdapterScopeError):
            codex.install_hook(ConfigScope.USER, "Stop", {"hooks": []})

    def test_local_scope_is_unsupported(self, codex):
        with pytest.raises(AdapterScopeError):
            codex.install_mcp_server(ConfigScope.LOCAL, "x", McpServerMetadata(command="x"))

    def test_prompt_from_other_agent_is_renamed(self, codex):
        adapted = codex.adapt_exported_files(ToolType.COMMAND, "frontend:lint", [ExportedFile("lint.md", "x")])
        assert [f.name for f in adapted] == ["lint.md"]
