"""Persistent key/value store for toolkeeper's own state.

Everything toolkeeper remembers between runs (profiles, preferences,
workspace overrides) lives in one JSON file:
- Guarded by a lock file against concurrent writers
- Backed up before every save and written via temp file + rename
- Corrupt content is restored from the backup, then from an empty default
"""

import json
import logging
import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from utils import constants
from utils.constants import ERROR_MESSAGES, STATE_VERSION

logger = logging.getLogger(__name__)


class StateLockedError(RuntimeError):
    """Another process holds the state lock."""


class StateStore:
    """JSON-backed key/value store with lock, backup and corruption recovery."""

    def __init__(
        self,
        state_file: Optional[Path] = None,
        backup_file: Optional[Path] = None,
        lock_file: Optional[Path] = None,
    ):
        self.state_file = Path(state_file) if state_file else constants.STATE_FILE
        self.backup_file = Path(backup_file) if backup_file else self.state_file.with_name(
            constants.STATE_BACKUP_FILE.name
        )
        self.lock_file = Path(lock_file) if lock_file else self.state_file.with_name(
            constants.STATE_LOCK_FILE.name
        )

        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"StateStore initialized: {self.state_file}")

    def _acquire_lock(self, timeout: float = 5.0) -> bool:
        """
        Acquire file lock for safe concurrent access.

        Args:
            timeout: Maximum time to wait for lock in seconds

        Returns:
            True if lock acquired, False otherwise
        """
        start_time = time.time()
        while time.time() - start_time < timeout:
            try:
                self.lock_file.touch(exist_ok=False)
                logger.debug("Lock acquired")
                return True
            except FileExistsError:
                time.sleep(0.1)
            except OSError as e:
                logger.warning(f"Error acquiring lock: {e}")
                time.sleep(0.1)

        logger.error("Failed to acquire lock within timeout")
        return False

    def _release_lock(self):
        """Release file lock."""
        try:
            if self.lock_file.exists():
                self.lock_file.unlink()
                logger.debug("Lock released")
        except OSError as e:
            logger.warning(f"Error releasing lock: {e}")

    @staticmethod
    def _default_state() -> Dict[str, Any]:
        return {"version": STATE_VERSION, "values": {}}

    @staticmethod
    def _read_state_file(path: Path) -> Dict[str, Any]:
        """
        Parse a state document.

        Raises:
            ValueError: If the file is not a valid state document
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get("values"), dict):
            raise ValueError("State document has no 'values' mapping")
        return data

    def _load_unlocked(self) -> Dict[str, Any]:
        if not self.state_file.exists():
            return self._default_state()

        try:
            return self._read_state_file(self.state_file)
        except (ValueError, OSError) as e:
            logger.error(f"Corrupted state file: {e}")
            logger.info(ERROR_MESSAGES["STATE_CORRUPTED"])

        if self.backup_file.exists():
            try:
                data = self._read_state_file(self.backup_file)
                logger.info(ERROR_MESSAGES["BACKUP_RESTORED"])
                self._write_unlocked(data, backup=False)
                return data
            except (ValueError, OSError) as e:
                logger.error(f"Backup is also corrupted, using empty state: {e}")
        else:
            logger.warning("No backup found, using empty state")

        data = self._default_state()
        self._write_unlocked(data, backup=False)
        return data

    def _write_unlocked(self, data: Dict[str, Any], backup: bool = True) -> None:
        if backup and self.state_file.exists():
            shutil.copy2(self.state_file, self.backup_file)
            logger.debug("Backup created")

        temp_file = self.state_file.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        temp_file.replace(self.state_file)

    def load(self) -> Dict[str, Any]:
        """
        Load all stored values.

        Raises:
            StateLockedError: If the lock cannot be acquired
        """
        if not self._acquire_lock():
            raise StateLockedError(ERROR_MESSAGES["STATE_LOCKED"])
        try:
            return dict(self._load_unlocked()["values"])
        finally:
            self._release_lock()

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` (anything JSON serializable) under ``key``."""
        self._update(lambda values: values.__setitem__(key, value))
        logger.debug(f"State key '{key}' saved")

    def delete(self, key: str) -> None:
        self._update(lambda values: values.pop(key, None))

    def keys(self) -> List[str]:
        return sorted(self.load().keys())

    def _update(self, change) -> None:
        if not self._acquire_lock():
            raise StateLockedError(ERROR_MESSAGES["STATE_LOCKED"])
        try:
            data = self._load_unlocked()
            change(data["values"])
            data["version"] = STATE_VERSION
            self._write_unlocked(data)
        except Exception as e:
            logger.error(f"Failed to save state: {e}")
            raise
        finally:
            self._release_lock()
