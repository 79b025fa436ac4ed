"""
Usage quota model.

Authoritative per-period usage counters and plan limits. A row with a null
``user_id`` is the organization-wide quota.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mocah.core.db.models.base import BaseModel


class UsageQuota(BaseModel):
    __tablename__ = "usage_quota"
    __table_args__ = (
        UniqueConstraint(
            "organization_id", "user_id", "period", name="uq_usage_quota_scope"
        ),
    )

    organization_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    period: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="Billing period, e.g. '2025-01'"
    )

    text_generations: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    image_generations: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_tokens: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # None means unlimited
    limit_text_generations: Mapped[int | None] = mapped_column(Integer)
    limit_image_generations: Mapped[int | None] = mapped_column(Integer)
    limit_tokens: Mapped[int | None] = mapped_column(Integer)

    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
