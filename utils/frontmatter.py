"""YAML front-matter helpers for markdown-based tools (skills, commands, agents)."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


class FrontmatterError(ValueError):
    """Raised when a front-matter block exists but is not a YAML mapping."""


@dataclass
class Frontmatter:
    """Parsed front-matter block plus the markdown body that follows it."""

    data: Dict[str, Any]
    body: str


def extract_frontmatter(content: str) -> Optional[Frontmatter]:
    """
    Extract the YAML front-matter block from markdown content.

    Args:
        content: Full markdown text

    Returns:
        Frontmatter, or None when the file has no (or an empty) block

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping
    """
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return None

    block = match.group(1)
    body = content[match.end():].strip()
    if not block.strip():
        return None

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML front-matter: {e}") from e

    if data is None:
        return None
    if not isinstance(data, dict):
        raise FrontmatterError("Front-matter must be a mapping of key: value pairs")

    return Frontmatter(data={str(k): v for k, v in data.items()}, body=body)


def set_frontmatter_field(content: str, key: str, value: Optional[Any]) -> str:
    """
    Set or remove a single top-level front-matter key, leaving other lines as written.

    Passing ``None`` removes the key. A block is created when the file has none.
    """
    match = _FRONTMATTER_PATTERN.match(content)
    if value is None:
        rendered = None
    else:
        rendered = f"{key}: {yaml.safe_dump(value, default_flow_style=True).strip()}"
        if rendered.endswith("\n..."):
            rendered = rendered[:-4]

    if not match:
        if rendered is None:
            return content
        return f"---\n{rendered}\n---\n{content}"

    lines = match.group(1).splitlines()
    key_pattern = re.compile(rf"^{re.escape(key)}\s*:")
    kept = []
    replaced = False
    for line in lines:
        if key_pattern.match(line):
            if rendered is not None and not replaced:
                kept.append(rendered)
                replaced = True
            continue
        kept.append(line)

    if rendered is not None and not replaced:
        kept.append(rendered)

    rest = content[match.end():]
    return "---\n" + "\n".join(kept) + "\n---\n" + rest
