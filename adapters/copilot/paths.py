"""File locations used by GitHub Copilot in VS Code."""

from pathlib import Path


def user_mcp_path(vscode_user_dir: Path) -> Path:
    return vscode_user_dir / "mcp.json"


def workspace_mcp_path(root: Path) -> Path:
    return root / ".vscode" / "mcp.json"


def workspace_agents_dir(root: Path) -> Path:
    return root / ".github" / "agents"


def workspace_prompts_dir(root: Path) -> Path:
    return root / ".github" / "prompts"


def copilot_dir(home: Path) -> Path:
    return home / ".copilot"
