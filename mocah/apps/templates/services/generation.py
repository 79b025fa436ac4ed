"""
Generation service: per-request context loading and versioned generation.

- Resolving membership and brand kit for a generation request
- Routing a generation to the v1 or v2 pipeline
- Falling back to v1 when v2 fails (if enabled)
- Emitting generation metrics
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mocah.apps.templates.services.brand_kit import brand_kit_service
from mocah.apps.templates.services.membership import membership_service
from mocah.core.config import generation_logger
from mocah.core.db import AsyncSessionLocal
from mocah.core.enums import GenerationVersion
from mocah.core.services.rollout import (
    GenerationMetadata,
    MetadataLoader,
    RolloutFlags,
    get_rollout_flags,
    get_template_generation_version,
    log_generation_metrics,
)


@dataclass(frozen=True)
class GenerationContext:
    """Facts a template generation request needs before prompting.

    Attributes:
        is_member: Whether the user belongs to the organization.
        include_brand_guide: Whether the brand kit should shape the prompt.
        brand_kit: The brand kit document, or None if excluded or missing.
    """

    is_member: bool
    include_brand_guide: bool
    brand_kit: dict[str, Any] | None = None


@dataclass
class GenerationResult:
    """What a pipeline run hands back."""

    output: Any
    total_tokens: int | None = None
    reasoning_tokens: int | None = None
    tool_call_count: int | None = None


GenerationRunner = Callable[[], Awaitable[GenerationResult]]


class GenerationService:
    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal
    ):
        self.session_factory = session_factory

    async def _check_membership(self, user_id: str, organization_id: str) -> bool:
        async with self.session_factory() as session:
            return await membership_service.check_membership(
                session, user_id, organization_id
            )

    async def _get_brand_kit(self, organization_id: str) -> dict[str, Any] | None:
        async with self.session_factory() as session:
            return await brand_kit_service.get_brand_kit(session, organization_id)

    async def load_generation_context(
        self,
        user_id: str,
        organization_id: str,
        include_brand_guide: bool | None = None,
    ) -> GenerationContext:
        """
        Resolve membership and brand kit for a generation request.

        Both lookups run concurrently, each with its own session, so two cache
        misses cost one database round-trip of latency rather than two.

        Args:
            user_id: The requesting user.
            organization_id: The organization the template belongs to.
            include_brand_guide: Explicit toggle from the request; when None
                the user's stored preference is used (default: include).

        Returns:
            GenerationContext: The resolved context.

        Raises:
            DatabaseException: If the brand kit cannot be read.
        """
        if include_brand_guide is None:
            include_brand_guide = await brand_kit_service.get_brand_guide_preference(
                user_id, organization_id
            )

        if include_brand_guide:
            is_member, brand_kit = await asyncio.gather(
                self._check_membership(user_id, organization_id),
                self._get_brand_kit(organization_id),
            )
        else:
            is_member = await self._check_membership(user_id, organization_id)
            brand_kit = None

        return GenerationContext(
            is_member=is_member,
            include_brand_guide=include_brand_guide,
            brand_kit=brand_kit,
        )

    async def generate_with_rollout(
        self,
        organization_id: str,
        run_v1: GenerationRunner,
        run_v2: GenerationRunner,
        *,
        user_id: str | None = None,
        template_id: str | None = None,
        flags: RolloutFlags | None = None,
        metadata_loader: MetadataLoader | None = None,
    ) -> tuple[GenerationResult, GenerationMetadata]:
        """
        Run the pipeline the organization is routed to.

        When v2 raises and ``fallback_on_error`` is set, v1 is run instead and
        the metrics record the fallback along with the v2 error. Metrics are
        logged for every run, failed ones included.

        Raises:
            Exception: Whatever the final pipeline run raised.
        """
        flags = flags or get_rollout_flags()
        version = await get_template_generation_version(
            organization_id, flags=flags, metadata_loader=metadata_loader
        )
        metadata = GenerationMetadata(
            version=version,
            organization_id=organization_id,
            template_id=template_id,
            user_id=user_id,
        )
        started = time.perf_counter()

        try:
            if version is GenerationVersion.V1:
                result = await run_v1()
            else:
                try:
                    result = await run_v2()
                except Exception as e:
                    if not flags.fallback_on_error:
                        raise
                    generation_logger.warning(
                        "v2 generation failed, falling back to v1",
                        extra={
                            "context": {
                                "organization_id": organization_id,
                                "error": str(e),
                            }
                        },
                    )
                    metadata.version = GenerationVersion.V1
                    metadata.fallback_used = True
                    metadata.error = str(e)
                    result = await run_v1()
        except Exception as e:
            metadata.error = str(e)
            metadata.duration_ms = int((time.perf_counter() - started) * 1000)
            log_generation_metrics(metadata)
            raise

        metadata.duration_ms = int((time.perf_counter() - started) * 1000)
        metadata.total_tokens = result.total_tokens
        metadata.reasoning_tokens = result.reasoning_tokens
        metadata.tool_call_count = result.tool_call_count
        log_generation_metrics(metadata)
        return result, metadata


generation_service = GenerationService()
