"""Preferences data model for toolkeeper."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Preferences:
    """Small user-level scalars kept in the state store."""

    # Agent
    active_agent_id: Optional[str] = None

    # Notices the user chose not to see again
    dismissed_notices: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "active_agent_id": self.active_agent_id,
            "dismissed_notices": list(self.dismissed_notices),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Preferences":
        """Create from dictionary loaded from JSON."""
        dismissed = data.get("dismissed_notices", [])
        if not isinstance(dismissed, list):
            dismissed = []
        return cls(
            active_agent_id=data.get("active_agent_id"),
            dismissed_notices=[str(n) for n in dismissed],
        )

    def dismiss(self, notice_id: str) -> None:
        if notice_id not in self.dismissed_notices:
            self.dismissed_notices.append(notice_id)

    def is_dismissed(self, notice_id: str) -> bool:
        return notice_id in self.dismissed_notices
