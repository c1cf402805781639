"""Parsers for tools that live as markdown files on disk (skills and commands).

Skills are directories holding a ``SKILL.md`` manifest; commands are single
markdown files. Both are disabled by appending ``.disabled`` to the
directory or file name.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.file_io import FileIO
from models.enums import ConfigScope, ToolStatus, ToolType
from models.tool import CommandMetadata, NormalizedTool, SkillMetadata, ToolSource
from utils.constants import DISABLED_SUFFIX
from utils.frontmatter import FrontmatterError, extract_frontmatter

logger = logging.getLogger(__name__)

SKILL_MANIFEST = "SKILL.md"

_BACKUP_FILE_PATTERN = re.compile(r"\.bak\.\d+$")


def is_backup_or_temp(path: Path) -> bool:
    return bool(_BACKUP_FILE_PATTERN.search(path.name)) or path.name.startswith(".tmp_")


def _status(disabled: bool) -> ToolStatus:
    return ToolStatus.DISABLED if disabled else ToolStatus.ENABLED


def _split_frontmatter(data: Dict[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def parse_skill_directory(
    skill_dir: Path,
    scope: ConfigScope,
    file_io: FileIO,
    validate_frontmatter,
) -> NormalizedTool:
    """
    Build a NormalizedTool for one skill directory.

    Args:
        skill_dir: Directory that should hold SKILL.md
        scope: Scope the directory belongs to
        file_io: Reader for the manifest
        validate_frontmatter: Callable returning a list of error strings (empty if valid)

    Returns:
        The skill, with Warning status when its manifest is missing or invalid
    """
    disabled = skill_dir.name.endswith(DISABLED_SUFFIX)
    name = skill_dir.name[: -len(DISABLED_SUFFIX)] if disabled else skill_dir.name
    manifest = skill_dir / SKILL_MANIFEST

    tool = NormalizedTool(
        id=f"{ToolType.SKILL.value}:{scope.value}:{name}",
        type=ToolType.SKILL,
        name=name,
        scope=scope,
        status=_status(disabled),
        source=ToolSource(file_path=manifest, is_directory=True, directory_path=skill_dir),
        metadata=SkillMetadata(),
    )

    content = file_io.read_text_file(manifest)
    if content is None:
        tool.status = ToolStatus.WARNING
        tool.status_detail = "Missing SKILL.md"
        return tool

    try:
        frontmatter = extract_frontmatter(content)
    except FrontmatterError as e:
        tool.status = ToolStatus.WARNING
        tool.status_detail = str(e)
        return tool

    if frontmatter is None:
        tool.status = ToolStatus.WARNING
        tool.status_detail = "SKILL.md has no frontmatter (name and description are required)"
        return tool

    data = frontmatter.data
    tool.description = data.get("description") if isinstance(data.get("description"), str) else None
    tool.metadata = SkillMetadata(
        allowed_tools=data.get("allowed-tools"),
        model=data.get("model"),
        extra=_split_frontmatter(data, ("name", "description", "allowed-tools", "model")),
    )

    errors = validate_frontmatter(data)
    if errors:
        tool.status = ToolStatus.WARNING
        tool.status_detail = "Invalid frontmatter: " + "; ".join(errors)
    return tool


def parse_skills_dir(
    skills_dir: Path,
    scope: ConfigScope,
    file_io: FileIO,
    validate_frontmatter,
) -> List[NormalizedTool]:
    """Parse every skill directory under ``skills_dir``; a missing directory gives []."""
    tools = []
    for skill_dir in file_io.list_directories(skills_dir):
        if skill_dir.name.startswith("."):
            continue
        tools.append(parse_skill_directory(skill_dir, scope, file_io, validate_frontmatter))
    return tools


def command_name_for(path: Path, root: Path, suffix: str) -> Optional[str]:
    """
    Derive a command name from its path relative to the commands root.

    ``frontend/lint.md`` becomes ``frontend:lint``. Returns None for files
    that are not commands.
    """
    file_name = path.name
    if file_name.endswith(DISABLED_SUFFIX):
        file_name = file_name[: -len(DISABLED_SUFFIX)]
    if not file_name.endswith(suffix) or file_name == suffix:
        return None

    stem = file_name[: -len(suffix)]
    parts = list(path.relative_to(root).parent.parts)
    if any(part.startswith(".") for part in parts):
        return None
    return ":".join(parts + [stem])


def parse_command_file(
    path: Path,
    name: str,
    scope: ConfigScope,
    file_io: FileIO,
    validate_frontmatter=None,
) -> NormalizedTool:
    """Build a NormalizedTool for a single command file."""
    disabled = path.name.endswith(DISABLED_SUFFIX)
    tool = NormalizedTool(
        id=f"{ToolType.COMMAND.value}:{scope.value}:{name}",
        type=ToolType.COMMAND,
        name=name,
        scope=scope,
        status=_status(disabled),
        source=ToolSource(file_path=path),
        metadata=CommandMetadata(),
    )

    content = file_io.read_text_file(path) or ""
    try:
        frontmatter = extract_frontmatter(content)
    except FrontmatterError as e:
        tool.status = ToolStatus.WARNING
        tool.status_detail = str(e)
        return tool

    if frontmatter is None:
        return tool

    data = frontmatter.data
    description = data.get("description")
    tool.description = description if isinstance(description, str) else None
    tool.metadata = CommandMetadata(
        argument_hint=data.get("argument-hint"),
        model=data.get("model"),
        allowed_tools=data.get("allowed-tools"),
        extra=_split_frontmatter(data, ("description", "argument-hint", "model", "allowed-tools")),
    )

    if validate_frontmatter is not None:
        errors = validate_frontmatter(data)
        if errors:
            tool.status = ToolStatus.WARNING
            tool.status_detail = "Invalid frontmatter: " + "; ".join(errors)
    return tool


def parse_commands_dir(
    commands_dir: Path,
    scope: ConfigScope,
    file_io: FileIO,
    suffix: str = ".md",
    recursive: bool = True,
    validate_frontmatter=None,
) -> List[NormalizedTool]:
    """Parse every command file under ``commands_dir``; a missing directory gives []."""
    tools = []
    for path in file_io.list_files(commands_dir, recursive=recursive):
        if is_backup_or_temp(path):
            continue
        name = command_name_for(path, commands_dir, suffix)
        if name is None:
            continue
        tools.append(parse_command_file(path, name, scope, file_io, validate_frontmatter))
    return tools


def collect_tool_files(root: Path, file_io: FileIO) -> List[Tuple[str, str]]:
    """
    Return ``(relative_name, text)`` for every text file under ``root``.

    Backups, temp files and files that are not valid UTF-8 are skipped.
    """
    files = []
    for path in file_io.list_files(root, recursive=True):
        if is_backup_or_temp(path):
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Skipping binary file in export: {path}")
            continue
        files.append((path.relative_to(root).as_posix(), content))
    return files
