"""File locations used by Codex."""

from pathlib import Path


def codex_dir(home: Path) -> Path:
    return home / ".codex"


def user_config_path(home: Path) -> Path:
    return codex_dir(home) / "config.toml"


def user_skills_dir(home: Path) -> Path:
    return codex_dir(home) / "skills"


def user_prompts_dir(home: Path) -> Path:
    return codex_dir(home) / "prompts"


def project_config_path(root: Path) -> Path:
    return root / ".codex" / "config.toml"


def project_skills_dir(root: Path) -> Path:
    return root / ".codex" / "skills"
