"""
Schemas for template generation endpoints.
"""

from mocah.apps.templates.schemas.cache import (
    BrandGuidePreferenceResponse,
    BrandGuidePreferenceUpdate,
    CacheInvalidateRequest,
    CacheInvalidateResponse,
)

__all__ = [
    "BrandGuidePreferenceResponse",
    "BrandGuidePreferenceUpdate",
    "CacheInvalidateRequest",
    "CacheInvalidateResponse",
]
