"""Supabase repository for admin activity."""

from dataclasses import dataclass

from supabase import Client

from store_manager.services.audit import ActivityRepository


@dataclass
class SupabaseActivityRepository(ActivityRepository):
    """Supabase-backed admin activity repository."""

    client: Client

    def create_activity(self, action: str, details: str | None, user_agent: str) -> None:
        """Create an admin activity row."""
        self.client.table("admin_activity").insert(
            {
                "action": action,
                "details": details,
                "user_agent": user_agent,
            }
        ).execute()
