"""Unit tests for the JSONC, front-matter and platform path helpers."""

from pathlib import Path

import pytest

from utils import platform_paths
from utils.frontmatter import FrontmatterError, extract_frontmatter, set_frontmatter_field
from utils.jsonc import dumps_pretty, loads_lenient, strip_jsonc


class TestJsonc:
    """Lenient parsing of hand-edited settings files."""

    def test_strict_json_passes_through(self):
        assert loads_lenient('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_comments_and_trailing_commas(self):
        content = """
        {
          // line comment
          "servers": {
            /* block */
            "github": {"command": "npx",},
          },
        }
        """
        assert loads_lenient(content) == {"servers": {"github": {"command": "npx"}}}

    def test_comment_markers_inside_strings_are_kept(self):
        content = '{"url": "https://example.com/a,}", "note": "/* not a comment */",}'
        assert loads_lenient(content) == {"url": "https://example.com/a,}", "note": "/* not a comment */"}

    def test_escaped_quotes(self):
        assert strip_jsonc('{"a": "say \\"hi\\" // there"}') == '{"a": "say \\"hi\\" // there"}'

    def test_invalid_content_still_raises(self):
        with pytest.raises(ValueError):
            loads_lenient("{not json")

    def test_dumps_pretty(self):
        assert dumps_pretty({"a": "é"}) == '{\n  "a": "é"\n}\n'


class TestFrontmatter:
    """Tests for YAML front-matter extraction and edits."""

    def test_extract(self):
        fm = extract_frontmatter("---\nname: review\ndescription: Review code\n---\n\nBody text\n")
        assert fm.data == {"name": "review", "description": "Review code"}
        assert fm.body == "Body text"

    def test_no_block(self):
        assert extract_frontmatter("# Just markdown") is None

    def test_empty_block(self):
        assert extract_frontmatter("---\n\n---\nBody") is None

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError):
            extract_frontmatter("---\nname: [unclosed\n---\n")

    def test_non_mapping(self):
        with pytest.raises(FrontmatterError):
            extract_frontmatter("---\n- a\n- b\n---\n")

    def test_set_field_keeps_other_lines(self):
        content = "---\nname: helper  # keep me\ndescription: Helps\n---\nBody\n"
        updated = set_frontmatter_field(content, "user-invokable", False)
        assert "name: helper  # keep me" in updated
        assert "user-invokable: false" in updated
        assert updated.endswith("Body\n")

    def test_remove_field(self):
        content = "---\nname: helper\nuser-invokable: false\n---\nBody\n"
        updated = set_frontmatter_field(content, "user-invokable", None)
        assert "user-invokable" not in updated
        assert extract_frontmatter(updated).data == {"name": "helper"}

    def test_set_field_creates_block(self):
        updated = set_frontmatter_field("Body\n", "model", "gpt-5")
        assert extract_frontmatter(updated).data == {"model": "gpt-5"}

    def test_remove_field_without_block_is_noop(self):
        assert set_frontmatter_field("Body\n", "model", None) == "Body\n"


class TestPlatformPaths:
    """Tests for OS-specific lookups."""

    def test_linux_managed_dir(self, monkeypatch):
        monkeypatch.setattr(platform_paths.sys, "platform", "linux")
        assert platform_paths.get_managed_config_dir(Path("/home/u")) == Path("/etc/claude-code")

    def test_darwin_managed_dir(self, monkeypatch):
        monkeypatch.setattr(platform_paths.sys, "platform", "darwin")
        assert platform_paths.get_managed_config_dir(Path("/Users/u")) == Path(
            "/Users/u/Library/Application Support/ClaudeCode"
        )

    def test_linux_vscode_dir_honours_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setattr(platform_paths.sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert platform_paths.get_vscode_user_dir(Path("/home/u")) == tmp_path / "Code" / "User"

    def test_unsupported_platform(self, monkeypatch):
        monkeypatch.setattr(platform_paths.sys, "platform", "sunos5")
        with pytest.raises(RuntimeError):
            platform_paths.get_platform()
