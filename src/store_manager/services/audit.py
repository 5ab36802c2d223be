"""Admin activity logging service."""

from dataclasses import dataclass
from typing import Protocol


class ActivityRepository(Protocol):
    """Persistence interface for admin activity entries."""

    def create_activity(self, action: str, details: str | None, user_agent: str) -> None:
        """Create an admin activity row."""


@dataclass
class ActivityService:
    """Service for recording admin activity."""

    repository: ActivityRepository
    user_agent: str = "store-manager"

    def record_activity(self, action: str, details: str | None = None) -> None:
        """Persist an activity entry."""
        self.repository.create_activity(
            action=action,
            details=details,
            user_agent=self.user_agent,
        )
