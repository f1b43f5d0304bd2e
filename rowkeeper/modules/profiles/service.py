import logging

from supabase import Client

from rowkeeper.modules.profiles.schemas import Role

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_role(self, user_id: str) -> Role:
        """Role from the user's profile. Anything but an explicit admin role is USER."""
        try:
            result = self.supabase.table("profiles")\
                .select("role")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.warning(f"Profile lookup failed for {user_id}, defaulting to user role: {e}")
            return Role.USER

        if result is None or not result.data:
            return Role.USER
        return Role.ADMIN if result.data.get("role") == Role.ADMIN.value else Role.USER
