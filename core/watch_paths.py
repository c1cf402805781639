"""Which files and directories a file watcher must observe for the active agent."""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from adapters.base import PlatformAdapter
from models.enums import ALL_SCOPES

# Directories holding one tool per entry are watched with their subtree
RECURSIVE_DIR_NAMES = ("skills", "commands", "prompts", "agents")


@dataclass(frozen=True)
class WatchDir:
    path: Path
    recursive: bool


def collect_watch_dirs(adapter: PlatformAdapter) -> List[WatchDir]:
    """
    Turn every scope's watch paths into de-duplicated watch directories.

    Tool directories are watched recursively; single config files are
    watched through their parent directory, non-recursively.
    """
    seen = {}
    for scope in ALL_SCOPES:
        for path in adapter.get_watch_paths(scope):
            if path.name in RECURSIVE_DIR_NAMES:
                watch = WatchDir(path=path, recursive=True)
            else:
                watch = WatchDir(path=path.parent, recursive=False)

            existing = seen.get(watch.path)
            if existing is None or (watch.recursive and not existing.recursive):
                seen[watch.path] = watch
    return list(seen.values())
