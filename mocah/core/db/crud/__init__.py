from mocah.core.db.crud.base import BaseDB
from mocah.core.db.crud.organization import (
    BrandKitDB,
    MemberDB,
    OrganizationDB,
    UsageQuotaDB,
    brand_kit_db,
    member_db,
    organization_db,
    usage_quota_db,
)

__all__ = [
    "BaseDB",
    "BrandKitDB",
    "MemberDB",
    "OrganizationDB",
    "UsageQuotaDB",
    "brand_kit_db",
    "member_db",
    "organization_db",
    "usage_quota_db",
]
