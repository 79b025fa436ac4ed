"""
Rollout decision engine for the v2 template generation pipeline.

Organizations are routed to v1 or v2 by, in order: the global kill switch,
the 0% shortcut, a per-organization override in the organization's metadata
(``{"ai": {"forceV2": true}}`` or ``{"ai": {"forceV1": true}}``), the 100%
shortcut, and finally a stable hash bucket compared against the rollout
percentage. A pinned organization keeps its version even at 100%.
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from mocah.core.config import RolloutSettings, generation_logger, rollout_logger
from mocah.core.db import AsyncSessionLocal
from mocah.core.db.crud import organization_db
from mocah.core.enums import GenerationVersion

MetadataLoader = Callable[[str], Awaitable[dict[str, Any] | str | None]]


@dataclass(frozen=True)
class RolloutFlags:
    """Feature flags for the v2 pipeline.

    Attributes:
        enabled: Master kill switch; False routes everyone to v1.
        rollout_percentage: Share of organizations (0-100) routed to v2.
        fallback_on_error: Retry with v1 when a v2 generation fails.
    """

    enabled: bool = False
    rollout_percentage: int = 0
    fallback_on_error: bool = True


def get_rollout_flags() -> RolloutFlags:
    """Read the rollout flags from the environment. Never cached."""
    rollout_settings = RolloutSettings()
    return RolloutFlags(
        enabled=rollout_settings.AI_V2_ENABLED,
        rollout_percentage=rollout_settings.AI_V2_ROLLOUT_PERCENTAGE,
        fallback_on_error=rollout_settings.AI_V2_FALLBACK_ON_ERROR,
    )


def rollout_hash(value: str) -> int:
    """
    Stable non-negative 32-bit hash of ``value``.

    ``h = h * 31 + unit`` over the UTF-16 code units, wrapped to a signed
    32-bit integer after each step, absolute value at the end. Lone
    surrogates are hashed as the code unit they stand for. Buckets assigned
    before this service existed depend on this exact function.
    """
    encoded = value.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def rollout_bucket(organization_id: str) -> int:
    """Return the organization's rollout bucket, 0-99."""
    return rollout_hash(organization_id) % 100


async def load_organization_metadata(organization_id: str) -> dict[str, Any] | None:
    async with AsyncSessionLocal() as session:
        return await organization_db.get_metadata(session, organization_id)


def _metadata_override(
    metadata: dict[str, Any] | str | None,
) -> GenerationVersion | None:
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            return None
    if not isinstance(metadata, dict):
        return None

    ai = metadata.get("ai")
    if not isinstance(ai, dict):
        return None
    if ai.get("forceV2") is True:
        return GenerationVersion.V2
    if ai.get("forceV1") is True:
        return GenerationVersion.V1
    return None


async def get_template_generation_version(
    organization_id: str,
    flags: RolloutFlags | None = None,
    metadata_loader: MetadataLoader | None = None,
) -> GenerationVersion:
    """
    Decide which generation pipeline serves ``organization_id``.

    For a fixed organization and percentage (and no override) the result is
    stable across calls and restarts, and raising the percentage never moves
    an organization from v2 back to v1.

    Args:
        organization_id: The organization to route.
        flags: Rollout flags; read fresh from the environment when omitted.
        metadata_loader: Coroutine returning the organization's metadata
            (dict or JSON string). Defaults to a database read.

    Returns:
        GenerationVersion: V1 or V2.
    """
    flags = flags or get_rollout_flags()

    if not flags.enabled:
        return GenerationVersion.V1
    if flags.rollout_percentage <= 0:
        return GenerationVersion.V1

    loader = metadata_loader or load_organization_metadata
    try:
        override = _metadata_override(await loader(organization_id))
    except Exception as e:
        rollout_logger.error(
            "Failed to check organization rollout override",
            extra={"context": {"organization_id": organization_id, "error": str(e)}},
        )
        override = None

    if override is not None:
        rollout_logger.info(
            f"Organization explicitly pinned to {override.value}",
            extra={
                "context": {
                    "organization_id": organization_id,
                    "version": override.value,
                }
            },
        )
        return override

    if flags.rollout_percentage >= 100:
        return GenerationVersion.V2

    bucket = rollout_bucket(organization_id)
    version = (
        GenerationVersion.V2
        if bucket < flags.rollout_percentage
        else GenerationVersion.V1
    )
    rollout_logger.debug(
        "Percentage-based rollout decision",
        extra={
            "context": {
                "organization_id": organization_id,
                "rollout_percentage": flags.rollout_percentage,
                "bucket": bucket,
                "version": version.value,
            }
        },
    )
    return version


@dataclass
class GenerationMetadata:
    """Post-hoc facts about one template generation, for metrics aggregation."""

    version: GenerationVersion
    organization_id: str
    template_id: str | None = None
    user_id: str | None = None
    fallback_used: bool = False
    tool_call_count: int | None = None
    reasoning_tokens: int | None = None
    total_tokens: int | None = None
    duration_ms: int | None = None
    error: str | None = None


def log_generation_metrics(metadata: GenerationMetadata) -> None:
    context = {key: value for key, value in asdict(metadata).items() if value is not None}
    context["version"] = metadata.version.value
    context["timestamp"] = datetime.now(timezone.utc).isoformat()
    generation_logger.info(
        "Template generation completed", extra={"context": context}
    )
