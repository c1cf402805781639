"""
Profile Manager - Business logic for profile operations.

Handles create, update, delete, get, list, switch and reconcile operations
for profiles. Profiles are persisted as one ``ProfileStore`` document in the
state store and validated on every load.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

from core.config_manager import ConfigManager
from core.schema_registry import SchemaRegistry
from core.state_store import StateStore
from core.store_schemas import STORE_SCHEMAS
from core.tool_manager import ToolManager
from models.enums import ALL_TOOL_TYPES, ToolStatus, ToolType
from models.profile import Profile, ProfileStore, ProfileToolEntry, ReconcileResult, SwitchResult
from models.tool import NormalizedTool
from utils.constants import ERROR_MESSAGES, PROFILE_STORE_KEY, PROFILE_STORE_VERSION
from utils.tool_key import canonical_key, extract_tool_type_from_key

logger = logging.getLogger(__name__)

STORE_SCHEMA = "profile-store"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProfileManager:
    """Manages profile operations with persistence."""

    def __init__(
        self,
        store: StateStore,
        config_manager: ConfigManager,
        tool_manager: ToolManager,
        schemas: Optional[SchemaRegistry] = None,
    ):
        self.store = store
        self.config_manager = config_manager
        self.tool_manager = tool_manager
        self.schemas = schemas or SchemaRegistry()
        if not self.schemas.has_schema(STORE_SCHEMA):
            self.schemas.register_schemas(STORE_SCHEMAS)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load_store(self) -> ProfileStore:
        """Load the profile store; anything invalid fails closed to an empty store."""
        raw = self.store.get(PROFILE_STORE_KEY)
        if raw is None:
            return ProfileStore(version=PROFILE_STORE_VERSION)

        validation = self.schemas.validate(STORE_SCHEMA, raw)
        if not validation.success:
            logger.error(f"Stored profiles are invalid, ignoring them: {validation.errors}")
            return ProfileStore(version=PROFILE_STORE_VERSION)

        try:
            return ProfileStore.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Stored profiles could not be parsed, ignoring them: {e}")
            return ProfileStore(version=PROFILE_STORE_VERSION)

    def _save_store(self, profile_store: ProfileStore) -> None:
        profile_store.version = PROFILE_STORE_VERSION
        self.store.set(PROFILE_STORE_KEY, profile_store.to_dict())

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def _read_inventory(self) -> Tuple[Dict[str, NormalizedTool], Set[ToolType]]:
        """
        Current tools by canonical key, plus the types that hit an unreadable source.

        Managed tools are read-only and Error placeholders have no identity,
        so neither takes part in profiles.
        """
        tools: Dict[str, NormalizedTool] = {}
        unreadable: Set[ToolType] = set()
        for tool_type in ALL_TOOL_TYPES:
            for tool in self.config_manager.read_all_tools(tool_type):
                if tool.status == ToolStatus.ERROR:
                    unreadable.add(tool_type)
                    continue
                if tool.is_managed:
                    continue
                tools.setdefault(canonical_key(tool), tool)
        return tools, unreadable

    def live_tools(self) -> Dict[str, NormalizedTool]:
        """Current non-managed, readable tools by canonical key."""
        return self._read_inventory()[0]

    def snapshot_tools(self) -> List[ProfileToolEntry]:
        """Capture every non-managed tool and whether it is enabled right now."""
        return [ProfileToolEntry(key=key, enabled=tool.is_enabled) for key, tool in self.live_tools().items()]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_profile(
        self,
        name: str,
        tools: Optional[List[ProfileToolEntry]] = None
    ) -> Tuple[bool, Optional[str], Optional[Profile]]:
        """
        Create a new profile.

        Args:
            name: Display name for profile
            tools: Explicit entries; the current environment is snapshotted when omitted

        Returns:
            Tuple of (success, error_message, profile)
        """
        try:
            if not name or not name.strip():
                return False, "Profile name cannot be empty", None

            entries = list(tools) if tools is not None else self.snapshot_tools()
            now = _now()
            profile = Profile(
                id=str(uuid.uuid4()),
                name=name.strip(),
                tools=entries,
                created_at=now,
                updated_at=now,
            )

            profile_store = self._load_store()
            profile_store.profiles.append(profile)
            self._save_store(profile_store)

            logger.info(f"Profile created: {profile.name} with {len(entries)} tools")
            return True, None, profile

        except Exception as e:
            error_msg = f"Failed to create profile: {e}"
            logger.error(error_msg)
            return False, error_msg, None

    def update_profile(
        self,
        profile_id: str,
        name: Optional[str] = None,
        tools: Optional[List[ProfileToolEntry]] = None
    ) -> Tuple[bool, Optional[str], Optional[Profile]]:
        """
        Update an existing profile.

        Args:
            profile_id: Profile to update
            name: New name (if provided)
            tools: New tool list (if provided)

        Returns:
            Tuple of (success, error_message, profile)
        """
        try:
            profile_store = self._load_store()
            profile = profile_store.find(profile_id)
            if profile is None:
                return False, ERROR_MESSAGES["PROFILE_NOT_FOUND"], None

            if name is not None:
                if not name.strip():
                    return False, "Profile name cannot be empty", None
                profile.name = name.strip()
            if tools is not None:
                profile.tools = list(tools)
            profile.updated_at = _now()

            self._save_store(profile_store)
            logger.info(f"Profile updated: {profile.name}")
            return True, None, profile

        except Exception as e:
            error_msg = f"Failed to update profile: {e}"
            logger.error(error_msg)
            return False, error_msg, None

    def delete_profile(self, profile_id: str) -> Tuple[bool, Optional[str]]:
        """
        Delete a profile, clearing the active id if it pointed at it.

        Returns:
            Tuple of (success, error_message)
        """
        try:
            profile_store = self._load_store()
            profile = profile_store.find(profile_id)
            if profile is None:
                return False, ERROR_MESSAGES["PROFILE_NOT_FOUND"]

            profile_store.profiles.remove(profile)
            if profile_store.active_profile_id == profile_id:
                profile_store.active_profile_id = None

            self._save_store(profile_store)
            logger.info(f"Profile deleted: {profile.name}")
            return True, None

        except Exception as e:
            error_msg = f"Failed to delete profile: {e}"
            logger.error(error_msg)
            return False, error_msg

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        try:
            return self._load_store().find(profile_id)
        except Exception as e:
            logger.error(f"Failed to get profile: {e}")
            return None

    def find_profile_by_name(self, name: str) -> Optional[Profile]:
        try:
            return self._load_store().find_by_name(name)
        except Exception as e:
            logger.error(f"Failed to find profile: {e}")
            return None

    def list_profiles(self) -> List[Profile]:
        try:
            return self._load_store().profiles
        except Exception as e:
            logger.error(f"Failed to list profiles: {e}")
            return []

    def get_active_profile_id(self) -> Optional[str]:
        try:
            return self._load_store().active_profile_id
        except Exception as e:
            logger.error(f"Failed to read active profile: {e}")
            return None

    def set_active_profile_id(self, profile_id: Optional[str]) -> None:
        """
        Mark a profile active, or clear the active profile with None.

        Raises:
            KeyError: If ``profile_id`` does not name a stored profile
        """
        profile_store = self._load_store()
        if profile_id is not None and profile_store.find(profile_id) is None:
            raise KeyError(f"{ERROR_MESSAGES['PROFILE_NOT_FOUND']}: {profile_id}")
        profile_store.active_profile_id = profile_id
        self._save_store(profile_store)

    # ------------------------------------------------------------------
    # Switching and reconciliation
    # ------------------------------------------------------------------

    def _plan_switch(
        self, profile: Profile, live: Dict[str, NormalizedTool]
    ) -> Tuple[List[Tuple[NormalizedTool, bool]], int]:
        """
        Build the ordered toggle plan for ``profile``.

        Profile entries come first, then every enabled tool the profile does
        not mention, which gets disabled.

        Returns:
            Tuple of (plan, skipped_count)
        """
        plan: List[Tuple[NormalizedTool, bool]] = []
        skipped = 0
        members = set()

        for entry in profile.tools:
            members.add(entry.key)
            tool = live.get(entry.key)
            if tool is None:
                logger.debug(f"Skipping {entry.key}: not present")
                skipped += 1
                continue
            if tool.is_enabled != entry.enabled:
                plan.append((tool, entry.enabled))

        for key, tool in live.items():
            if key not in members and tool.is_enabled:
                plan.append((tool, False))

        return plan, skipped

    def switch_profile(self, profile_id: Optional[str]) -> SwitchResult:
        """
        Bring the environment to exactly the tool states of a profile.

        Passing None deactivates the current profile without touching tools.
        Toggles run one after another because several tools can share one
        config file; each is re-checked against disk right before it runs.
        The active profile id is written only after every toggle was attempted.

        Args:
            profile_id: Profile to switch to, or None

        Returns:
            SwitchResult with toggled/skipped/failed counts
        """
        if profile_id is None:
            try:
                self.set_active_profile_id(None)
            except Exception as e:
                logger.error(f"Failed to clear active profile: {e}")
                return SwitchResult(success=False, errors=[str(e)])
            logger.info("Profile deactivated")
            return SwitchResult()

        profile = self.get_profile(profile_id)
        if profile is None:
            return SwitchResult(success=False, errors=[ERROR_MESSAGES["PROFILE_NOT_FOUND"]])

        plan, skipped = self._plan_switch(profile, self.live_tools())
        result = SwitchResult(skipped=skipped)

        for tool, enabled in plan:
            outcome = self.tool_manager.set_tool_enabled(tool, enabled)
            if not outcome.success:
                result.failed += 1
                result.errors.append(f"{tool.name}: {outcome.error}")
            elif outcome.changed:
                result.toggled += 1
            else:
                logger.debug(f"{tool.id} already matched the profile")

        try:
            self.set_active_profile_id(profile_id)
        except Exception as e:
            logger.error(f"Failed to record active profile: {e}")
            result.errors.append(str(e))
            result.failed += 1

        result.success = result.failed == 0
        logger.info(
            f"Switched to profile '{profile.name}': {result.toggled} toggled, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    def reconcile_profile(self, profile_id: str) -> ReconcileResult:
        """
        Drop entries whose tools no longer exist; saves only when something was removed.

        While a config file of some tool type cannot be read, entries of that
        type are kept: their tools may still exist in the broken file.
        """
        profile = self.get_profile(profile_id)
        if profile is None:
            return ReconcileResult(valid=0, removed=0)

        live, unreadable = self._read_inventory()
        kept_entries = []
        unverified = 0
        for entry in profile.tools:
            if entry.key in live:
                kept_entries.append(entry)
            elif extract_tool_type_from_key(entry.key) in unreadable:
                kept_entries.append(entry)
                unverified += 1
        removed = len(profile.tools) - len(kept_entries)

        if unverified:
            logger.warning(
                f"Kept {unverified} entries of profile '{profile.name}' that could not be "
                f"checked because a config file is unreadable"
            )
        if removed:
            self.update_profile(profile_id, tools=kept_entries)
            logger.info(f"Removed {removed} stale entries from profile '{profile.name}'")

        return ReconcileResult(valid=len(kept_entries) - unverified, removed=removed, unverified=unverified)

    # ------------------------------------------------------------------
    # Active profile sync
    # ------------------------------------------------------------------

    def sync_tool_to_active_profile(self, key: str, enabled: bool) -> None:
        """Record a single tool's new state in the active profile, adding it if needed."""
        active_id = self.get_active_profile_id()
        profile = self.get_profile(active_id) if active_id else None
        if profile is None:
            return

        entry = profile.entry_for(key)
        if entry is not None:
            if entry.enabled == enabled:
                return
            entry.enabled = enabled
        else:
            profile.tools.append(ProfileToolEntry(key=key, enabled=enabled))
        self.update_profile(profile.id, tools=profile.tools)

    def remove_tool_from_active_profile(self, key: str) -> None:
        active_id = self.get_active_profile_id()
        profile = self.get_profile(active_id) if active_id else None
        if profile is None:
            return

        remaining = [entry for entry in profile.tools if entry.key != key]
        if len(remaining) != len(profile.tools):
            self.update_profile(profile.id, tools=remaining)
