"""
Brand guide router for the per-user brand-guide toggle.

The acting user and organization are forwarded by the web tier in the
X-User-Id and X-Organization-Id headers alongside X-Internal-API-Key.
"""

from fastapi import APIRouter

from mocah.apps.templates.schemas import (
    BrandGuidePreferenceResponse,
    BrandGuidePreferenceUpdate,
)
from mocah.apps.templates.services import brand_kit_service
from mocah.core.dependencies import CallerContextDep

router = APIRouter(prefix="/brand-guide", tags=["Brand Guide"])


@router.get(
    "/preference",
    response_model=BrandGuidePreferenceResponse,
    summary="Get brand guide preference",
)
async def get_preference(caller: CallerContextDep) -> BrandGuidePreferenceResponse:
    include = await brand_kit_service.get_brand_guide_preference(
        caller.user_id, caller.organization_id
    )
    return BrandGuidePreferenceResponse(
        organization_id=caller.organization_id, include_brand_guide=include
    )


@router.put(
    "/preference",
    response_model=BrandGuidePreferenceResponse,
    summary="Set brand guide preference",
    description="""
    Store whether the organization's brand kit should shape this user's
    generations. The preference lives in the cache for 30 minutes.
    """,
)
async def set_preference(
    request: BrandGuidePreferenceUpdate,
    caller: CallerContextDep,
) -> BrandGuidePreferenceResponse:
    await brand_kit_service.set_brand_guide_preference(
        caller.user_id, caller.organization_id, request.include_brand_guide
    )
    return BrandGuidePreferenceResponse(
        organization_id=caller.organization_id,
        include_brand_guide=request.include_brand_guide,
    )
