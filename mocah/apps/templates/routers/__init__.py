"""
Routers for template generation.
"""

from mocah.apps.templates.routers.brand_guide import router as brand_guide_router
from mocah.apps.templates.routers.cache import router as cache_router

__all__ = [
    "brand_guide_router",
    "cache_router",
]
