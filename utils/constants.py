"""Constants, paths and user-facing messages for toolkeeper."""

import os
from pathlib import Path


# Paths
USER_HOME = Path.home()
CONFIG_DIR = Path(os.environ.get("TOOLKEEPER_HOME", USER_HOME / ".toolkeeper"))
STATE_FILE = CONFIG_DIR / "state.json"
STATE_BACKUP_FILE = CONFIG_DIR / "state.backup"
STATE_LOCK_FILE = CONFIG_DIR / "state.lock"
LOG_FILE = CONFIG_DIR / "toolkeeper.log"

# Application
APP_NAME = "toolkeeper"
APP_VERSION = "1.0.0"
STATE_VERSION = 1  # state.json format version

# Profiles
PROFILE_STORE_KEY = "profiles"
PROFILE_STORE_VERSION = 2
BUNDLE_TYPE = "toolkeeper-profile"
BUNDLE_VERSION = 2
BUNDLE_EXTENSION = ".tkprofile"
IMPORTED_SUFFIX = " (imported)"

# Key/value store keys
PREFERENCES_KEY = "preferences"
WORKSPACE_OVERRIDES_KEY = "workspaceProfileOverrides"

# Workspace association
WORKSPACE_CONFIG_DIR = ".toolkeeper"
WORKSPACE_PROFILE_FILE = "profile.json"

# Config files
MAX_BACKUPS = 5
DISABLED_SUFFIX = ".disabled"

# Error Messages (User-friendly)
ERROR_MESSAGES = {
    "STATE_LOCKED": "State file is locked by another process. Try again shortly.",
    "STATE_CORRUPTED": "State file corrupted. Restoring from backup...",
    "BACKUP_RESTORED": "State restored from backup successfully.",
    "MANAGED_READ_ONLY": "Cannot modify managed tools",
    "PROFILE_NOT_FOUND": "Profile not found",
    "NO_ACTIVE_AGENT": "No active agent. Select one with --agent.",
    "UNKNOWN_AGENT": "Unknown agent: {agent_id}",
    "SAME_SCOPE": "Tool is already in {scope} scope",
    "MOVE_TO_MANAGED": "Cannot move to managed scope (read-only)",
    "BUNDLE_INVALID": "File is not a valid toolkeeper profile bundle.",
    "BUNDLE_VERSION": "Unsupported bundle version {version}; expected {expected}.",
}
