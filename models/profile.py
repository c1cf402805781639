"""Profile data models: desired-state snapshots of tool membership."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ProfileToolEntry:
    """Membership of one tool (by canonical key) plus its desired enabled state."""

    key: str
    enabled: bool

    def to_dict(self) -> dict:
        return {"key": self.key, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileToolEntry":
        return cls(key=data["key"], enabled=bool(data["enabled"]))


@dataclass
class Profile:
    """Named set of tools and the enabled state each should have."""

    id: str
    name: str
    tools: List[ProfileToolEntry]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "tools": [entry.to_dict() for entry in self.tools],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        """Create from dictionary loaded from JSON."""
        return cls(
            id=data["id"],
            name=data["name"],
            tools=[ProfileToolEntry.from_dict(entry) for entry in data.get("tools", [])],
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data["updatedAt"]),
        )

    def entry_for(self, key: str) -> Optional[ProfileToolEntry]:
        for entry in self.tools:
            if entry.key == key:
                return entry
        return None


@dataclass
class ProfileStore:
    """Persisted root of all profiles. Loaded and saved as one unit."""

    profiles: List[Profile] = field(default_factory=list)
    active_profile_id: Optional[str] = None
    version: int = 2

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "profiles": [profile.to_dict() for profile in self.profiles],
            "activeProfileId": self.active_profile_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileStore":
        return cls(
            profiles=[Profile.from_dict(p) for p in data.get("profiles", [])],
            active_profile_id=data.get("activeProfileId"),
            version=data.get("version", 2),
        )

    def find(self, profile_id: str) -> Optional[Profile]:
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    def find_by_name(self, name: str) -> Optional[Profile]:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        return None


@dataclass
class SwitchResult:
    """Aggregate outcome of switching to a profile."""

    success: bool = True
    toggled: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class ReconcileResult:
    """Outcome of dropping profile entries whose tools no longer exist."""

    valid: int
    removed: int
    # Kept because their tool type could not be read completely
    unverified: int = 0
