"""
Membership service: read-through membership checks.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mocah.core.config import cache_logger
from mocah.core.db.crud import member_db
from mocah.core.services.cache import (
    cache_membership,
    get_cached_membership,
    invalidate_membership_cache,
)


class MembershipService:
    """Membership lookups served from Redis, falling back to the database."""

    async def check_membership(
        self, session: AsyncSession, user_id: str, organization_id: str
    ) -> bool:
        """
        Check whether a user belongs to an organization.

        The cache is consulted first; on a miss the database answers and the
        result (positive or negative) is written back. Any failure denies
        access.

        Args:
            session: Database session used on a cache miss.
            user_id: The user to check.
            organization_id: The organization to check.

        Returns:
            bool: True if the user is a member, False otherwise.
        """
        try:
            cached = await get_cached_membership(user_id, organization_id)
            if cached is not None:
                return cached

            is_member = await member_db.is_member(session, user_id, organization_id)
            await cache_membership(user_id, organization_id, is_member)
            return is_member
        except Exception as e:
            cache_logger.error(
                "Failed to check membership; denying access",
                extra={
                    "context": {
                        "user_id": user_id,
                        "organization_id": organization_id,
                        "error": str(e),
                    }
                },
            )
            return False

    async def invalidate_membership(self, user_id: str, organization_id: str) -> None:
        """Drop the cached membership; call when a member is added or removed."""
        await invalidate_membership_cache(user_id, organization_id)


membership_service = MembershipService()
