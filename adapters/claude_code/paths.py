"""File locations used by Claude Code."""

from pathlib import Path


def claude_dir(home: Path) -> Path:
    return home / ".claude"


def user_settings_path(home: Path) -> Path:
    return claude_dir(home) / "settings.json"


def claude_json_path(home: Path) -> Path:
    """~/.claude.json holds user-scope MCP servers next to unrelated app state."""
    return home / ".claude.json"


def user_skills_dir(home: Path) -> Path:
    return claude_dir(home) / "skills"


def user_commands_dir(home: Path) -> Path:
    return claude_dir(home) / "commands"


def project_settings_path(root: Path) -> Path:
    return root / ".claude" / "settings.json"


def project_local_settings_path(root: Path) -> Path:
    return root / ".claude" / "settings.local.json"


def project_mcp_path(root: Path) -> Path:
    return root / ".mcp.json"


def project_skills_dir(root: Path) -> Path:
    return root / ".claude" / "skills"


def project_commands_dir(root: Path) -> Path:
    return root / ".claude" / "commands"


def managed_settings_path(managed_dir: Path) -> Path:
    return managed_dir / "managed-settings.json"


def managed_mcp_path(managed_dir: Path) -> Path:
    return managed_dir / "managed-mcp.json"
