"""
Services for template generation.
"""

from mocah.apps.templates.services.brand_kit import BrandKitService, brand_kit_service
from mocah.apps.templates.services.generation import (
    GenerationContext,
    GenerationResult,
    GenerationService,
    generation_service,
)
from mocah.apps.templates.services.membership import (
    MembershipService,
    membership_service,
)
from mocah.apps.templates.services.usage import (
    UsageService,
    current_period,
    usage_service,
)

__all__ = [
    # Brand kit
    "BrandKitService",
    "brand_kit_service",
    # Generation
    "GenerationContext",
    "GenerationResult",
    "GenerationService",
    "generation_service",
    # Membership
    "MembershipService",
    "membership_service",
    # Usage
    "UsageService",
    "current_period",
    "usage_service",
]
