"""Rolling backups for config files.

Before every write the current file is copied to ``<name>.bak.1`` after the
existing backups have shifted up by one; at most ``MAX_BACKUPS`` are kept.
Directories removed outright are copied whole into a timestamped folder.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from utils.constants import MAX_BACKUPS

logger = logging.getLogger(__name__)


class BackupManager:
    """Creates, lists and restores numbered backups next to the original file."""

    def __init__(self, max_backups: int = MAX_BACKUPS):
        self.max_backups = max_backups

    @staticmethod
    def backup_path(path: Path, number: int) -> Path:
        return path.with_name(f"{path.name}.bak.{number}")

    def create_backup(self, path: Path) -> Optional[Path]:
        """
        Rotate existing backups and copy ``path`` to ``.bak.1``.

        Args:
            path: File about to be modified

        Returns:
            Path of the new backup, or None when the source does not exist
        """
        if not path.is_file():
            logger.debug(f"No backup needed, {path} does not exist")
            return None

        oldest = self.backup_path(path, self.max_backups)
        if oldest.exists():
            oldest.unlink()

        for number in range(self.max_backups - 1, 0, -1):
            current = self.backup_path(path, number)
            if current.exists():
                current.replace(self.backup_path(path, number + 1))

        target = self.backup_path(path, 1)
        shutil.copy2(path, target)
        logger.debug(f"Backup created: {target}")
        return target

    def list_backups(self, path: Path) -> List[Path]:
        """Return existing backups, newest first."""
        backups = []
        for number in range(1, self.max_backups + 1):
            candidate = self.backup_path(path, number)
            if candidate.exists():
                backups.append(candidate)
        return backups

    def restore_backup(self, path: Path, number: int = 1) -> bool:
        """
        Copy backup ``number`` over ``path``.

        Returns:
            True if a backup was restored, False if it does not exist
        """
        backup = self.backup_path(path, number)
        if not backup.exists():
            logger.warning(f"Backup {backup} not found, nothing restored")
            return False

        shutil.copy2(backup, path)
        logger.info(f"Restored {path} from {backup.name}")
        return True

    def backup_directory(self, path: Path, backup_root: Path) -> Optional[Path]:
        """
        Copy a whole directory (a skill being deleted) under ``backup_root``.

        Returns:
            The timestamped copy, or None when ``path`` is not a directory
        """
        if not path.is_dir():
            return None

        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        target = backup_root / f"{path.name}-{stamp}"
        shutil.copytree(path, target)
        logger.debug(f"Directory backup created: {target}")
        return target
