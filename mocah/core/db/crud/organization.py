"""
CRUD operations for organizations, memberships, brand kits and usage quotas.
"""

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from mocah.core.config import database_logger
from mocah.core.db.crud.base import BaseDB
from mocah.core.db.models import BrandKit, Member, Organization, UsageQuota


class OrganizationDB(BaseDB[Organization]):
    def __init__(self):
        super().__init__(Organization)

    async def get_metadata(
        self, session: AsyncSession, organization_id: str
    ) -> dict[str, Any] | None:
        """
        Return the organization's metadata document, decoded.

        Metadata is persisted as a JSON string. A missing organization or empty
        metadata yields None; an undecodable document is logged and treated
        as empty.
        """
        organization = await self.get_by_id(session, organization_id)
        if organization is None or not organization.org_metadata:
            return None

        try:
            metadata = json.loads(organization.org_metadata)
        except (TypeError, ValueError):
            database_logger.warning(
                f"Organization {organization_id} has malformed metadata; ignoring it"
            )
            return None

        return metadata if isinstance(metadata, dict) else None


class MemberDB(BaseDB[Member]):
    def __init__(self):
        super().__init__(Member)

    async def is_member(
        self, session: AsyncSession, user_id: str, organization_id: str
    ) -> bool:
        return await self.exists(
            session, {"user_id": user_id, "organization_id": organization_id}
        )


class BrandKitDB(BaseDB[BrandKit]):
    def __init__(self):
        super().__init__(BrandKit)

    async def get_by_organization(
        self, session: AsyncSession, organization_id: str
    ) -> BrandKit | None:
        return await self.get_one_by_filters(
            session, {"organization_id": organization_id}
        )


class UsageQuotaDB(BaseDB[UsageQuota]):
    def __init__(self):
        super().__init__(UsageQuota)

    async def get_for_period(
        self,
        session: AsyncSession,
        organization_id: str,
        user_id: str | None,
        period: str,
    ) -> UsageQuota | None:
        return await self.get_one_by_filters(
            session,
            {
                "organization_id": organization_id,
                "user_id": user_id,
                "period": period,
            },
        )


organization_db = OrganizationDB()
member_db = MemberDB()
brand_kit_db = BrandKitDB()
usage_quota_db = UsageQuotaDB()
