"""
Workspace Profile Manager - Associates a workspace with the profile it expects.

The association lives in <workspace>/.toolkeeper/profile.json as
``{"profileName": ...}`` so it can be committed and shared; names are used
instead of ids because ids are machine-specific. When the user picks a
different profile inside an associated workspace, an override is recorded
in the state store so the association does not fight that choice.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

from core.file_io import FileIO
from core.profile_manager import ProfileManager
from core.state_store import StateStore
from utils.constants import WORKSPACE_CONFIG_DIR, WORKSPACE_OVERRIDES_KEY, WORKSPACE_PROFILE_FILE

logger = logging.getLogger(__name__)


class WorkspaceProfileStatus(str, Enum):
    NONE = "none"
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    OVERRIDDEN = "overridden"
    UNKNOWN_PROFILE = "unknown_profile"


class WorkspaceProfileManager:
    """Manages workspace-to-profile associations and manual overrides."""

    def __init__(self, store: StateStore, profiles: ProfileManager, file_io: Optional[FileIO] = None):
        self.store = store
        self.profiles = profiles
        self.file_io = file_io or FileIO()

    @staticmethod
    def get_association_file(workspace_root: Path) -> Path:
        return Path(workspace_root) / WORKSPACE_CONFIG_DIR / WORKSPACE_PROFILE_FILE

    @staticmethod
    def _workspace_key(workspace_root: Path) -> str:
        return str(Path(workspace_root).resolve())

    def get_association(self, workspace_root: Path) -> Optional[str]:
        """
        Read the profile name a workspace expects.

        Returns:
            The profile name, or None if there is no (valid) association file
        """
        result = self.file_io.read_json_file(self.get_association_file(workspace_root))
        if not result.ok:
            if result.error:
                logger.warning(f"Ignoring workspace profile file in {workspace_root}: {result.error}")
            return None

        name = result.data.get("profileName") if isinstance(result.data, dict) else None
        if not isinstance(name, str) or not name:
            return None
        return name

    def set_association(self, workspace_root: Path, profile_name: str) -> Tuple[bool, Optional[str]]:
        """
        Associate a workspace with a profile, clearing any manual override.

        Returns:
            Tuple of (success, error_message)
        """
        try:
            path = self.get_association_file(workspace_root)
            current = self.file_io.read_json_file(path)
            data = dict(current.data) if current.ok and isinstance(current.data, dict) else {}
            data["profileName"] = profile_name
            self.file_io.write_json_file(path, data)
            self.clear_override(workspace_root)
            logger.info(f"Workspace {workspace_root} associated with profile '{profile_name}'")
            return True, None
        except Exception as e:
            error_msg = f"Error saving workspace profile: {e}"
            logger.error(error_msg)
            return False, error_msg

    def remove_association(self, workspace_root: Path) -> Tuple[bool, Optional[str]]:
        try:
            self.get_association_file(workspace_root).unlink(missing_ok=True)
            self.clear_override(workspace_root)
            return True, None
        except Exception as e:
            error_msg = f"Error removing workspace profile: {e}"
            logger.error(error_msg)
            return False, error_msg

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    def _overrides(self) -> Dict[str, dict]:
        overrides = self.store.get(WORKSPACE_OVERRIDES_KEY, {})
        return overrides if isinstance(overrides, dict) else {}

    def set_override(self, workspace_root: Path, manual_profile_name: Optional[str]) -> None:
        """Record that the user chose ``manual_profile_name`` (None = no profile) here."""
        overrides = self._overrides()
        overrides[self._workspace_key(workspace_root)] = {
            "manualProfileName": manual_profile_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.store.set(WORKSPACE_OVERRIDES_KEY, overrides)

    def clear_override(self, workspace_root: Path) -> None:
        overrides = self._overrides()
        if overrides.pop(self._workspace_key(workspace_root), None) is not None:
            self.store.set(WORKSPACE_OVERRIDES_KEY, overrides)

    def is_overridden(self, workspace_root: Path) -> bool:
        """
        True when a manual override is recorded for the workspace.

        An override naming a profile that no longer exists is stale; it is
        cleared and not counted.
        """
        entry = self._overrides().get(self._workspace_key(workspace_root))
        if not isinstance(entry, dict):
            return False

        manual = entry.get("manualProfileName")
        if manual is not None and self.profiles.find_profile_by_name(manual) is None:
            logger.debug(f"Clearing stale workspace override for {workspace_root}")
            self.clear_override(workspace_root)
            return False
        return True

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self, workspace_root: Path) -> WorkspaceProfileStatus:
        """Compare the workspace's expected profile with the active one."""
        expected = self.get_association(workspace_root)
        if expected is None:
            return WorkspaceProfileStatus.NONE

        profile = self.profiles.find_profile_by_name(expected)
        if profile is None:
            return WorkspaceProfileStatus.UNKNOWN_PROFILE
        if self.is_overridden(workspace_root):
            return WorkspaceProfileStatus.OVERRIDDEN
        if self.profiles.get_active_profile_id() == profile.id:
            return WorkspaceProfileStatus.MATCHED
        return WorkspaceProfileStatus.MISMATCHED
