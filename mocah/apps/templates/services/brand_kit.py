"""
Brand kit service: read-through brand kit lookups and the brand-guide toggle.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from mocah.core.db.crud import brand_kit_db
from mocah.core.services.cache import (
    cache_brand_guide_preference,
    cache_brand_kit,
    get_cached_brand_guide_preference,
    get_cached_brand_kit,
)


class BrandKitService:
    async def get_brand_kit(
        self, session: AsyncSession, organization_id: str
    ) -> dict[str, Any] | None:
        """
        Return the organization's brand kit as a camelCase document.

        Served from cache when present; otherwise read from the database and
        written back. Organizations without a brand kit return None and
        nothing is cached.

        Raises:
            DatabaseException: If the database read fails.
        """
        cached = await get_cached_brand_kit(organization_id)
        if cached is not None:
            return cached

        brand_kit = await brand_kit_db.get_by_organization(session, organization_id)
        if brand_kit is None:
            return None

        document = brand_kit.to_dict()
        await cache_brand_kit(organization_id, document)
        return document

    async def get_brand_guide_preference(
        self, user_id: str, organization_id: str
    ) -> bool:
        """Whether to apply the brand guide; defaults to True when never set."""
        preference = await get_cached_brand_guide_preference(user_id, organization_id)
        return True if preference is None else preference

    async def set_brand_guide_preference(
        self, user_id: str, organization_id: str, include_brand_guide: bool
    ) -> None:
        await cache_brand_guide_preference(
            user_id, organization_id, include_brand_guide
        )


brand_kit_service = BrandKitService()
