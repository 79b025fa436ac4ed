"""
Cache router for server-side cache invalidation.

Called by the web tier after a brand kit update so the next generation uses
fresh brand data. Protected by internal API key authentication
(X-Internal-API-Key header).
"""

from fastapi import APIRouter, status

from mocah.apps.templates.schemas import CacheInvalidateRequest, CacheInvalidateResponse
from mocah.core.config import cache_logger
from mocah.core.dependencies import InternalAPIKeyDep
from mocah.core.services.cache import invalidate_brand_kit_cache

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.post(
    "/invalidate",
    response_model=CacheInvalidateResponse,
    status_code=status.HTTP_200_OK,
    summary="Invalidate an organization's brand kit cache",
    description="""
    Drop the cached brand kit for an organization.

    Succeeds even when the cache is unavailable; the entry then simply
    expires on its own TTL (10 minutes).
    """,
)
async def invalidate_cache(
    request: CacheInvalidateRequest,
    _: InternalAPIKeyDep,
) -> CacheInvalidateResponse:
    await invalidate_brand_kit_cache(request.organization_id)
    cache_logger.info(
        f"Brand kit cache invalidation requested for organization {request.organization_id}"
    )
    return CacheInvalidateResponse(success=True)
