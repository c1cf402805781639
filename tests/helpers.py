"""File builders shared by the adapter, profile and CLI tests."""

import json
from pathlib import Path


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def write_skill(skills_dir: Path, name: str, description: str = "A skill", dir_name: str = None) -> Path:
    skill_dir = skills_dir / (dir_name or name)
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {name}\ndescription: {description}\n---\n\nDo the {name} thing.\n",
        encoding="utf-8",
    )
    return skill_dir


def write_command(commands_dir: Path, relative: str, body: str = "Run the checks.") -> Path:
    path = commands_dir / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\ndescription: {path.stem}\n---\n{body}\n", encoding="utf-8")
    return path
