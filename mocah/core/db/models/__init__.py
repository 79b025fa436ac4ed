from mocah.core.db.models.base import BaseModel
from mocah.core.db.models.brand_kit import BrandKit
from mocah.core.db.models.organization import Member, Organization
from mocah.core.db.models.usage_quota import UsageQuota

__all__ = [
    "BaseModel",
    "BrandKit",
    "Member",
    "Organization",
    "UsageQuota",
]
