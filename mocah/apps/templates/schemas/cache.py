"""
Pydantic schemas for cache and brand-guide endpoints.
"""

from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints

Identifier = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CacheInvalidateRequest(BaseModel):
    """Schema for invalidating an organization's cached brand kit."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"organization_id": "org_2f9c1a"}}
    )

    organization_id: Annotated[
        Identifier,
        Field(
            description="Organization whose brand kit changed",
            validation_alias=AliasChoices("organization_id", "organizationId"),
        ),
    ]


class CacheInvalidateResponse(BaseModel):
    success: bool = True


class BrandGuidePreferenceUpdate(BaseModel):
    """Schema for setting whether the brand guide shapes generations."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"include_brand_guide": False}}
    )

    include_brand_guide: Annotated[
        bool,
        Field(
            description="True to include the brand kit in prompts, False to exclude it",
            validation_alias=AliasChoices("include_brand_guide", "includeBrandGuide"),
        ),
    ]


class BrandGuidePreferenceResponse(BaseModel):
    organization_id: str
    include_brand_guide: Annotated[
        bool, Field(description="Defaults to true when never set")
    ]
