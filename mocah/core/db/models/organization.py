"""
Organization models.

Organizations are the tenant boundary: members, brand kits and usage quotas
all hang off an organization. This service only reads these tables.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mocah.core.db.models.base import BaseModel
from mocah.core.enums import MemberRole

if TYPE_CHECKING:
    from mocah.core.db.models.brand_kit import BrandKit


class Organization(BaseModel):
    """
    Model for organizations (tenants).

    Attributes:
        name: Display name.
        slug: URL-friendly unique identifier.
        org_metadata: Free-form JSON document stored as text. The ``ai``
            section carries rollout overrides (``forceV1`` / ``forceV2``).
    """

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String(128), nullable=False)

    slug: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )

    # "metadata" is reserved on declarative classes
    org_metadata: Mapped[str | None] = mapped_column(
        "metadata",
        Text,
        nullable=True,
    )

    members: Mapped[list["Member"]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    brand_kit: Mapped[Optional["BrandKit"]] = relationship(
        back_populates="organization",
        uselist=False,
    )


class Member(BaseModel):
    """
    Model for organization membership.

    Attributes:
        user_id: The member's user id (owned by the auth provider).
        organization_id: Foreign key to the organization.
        role: Member role within the organization.
    """

    __tablename__ = "member"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_member_user_org"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    organization_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole, native_enum=False),
        default=MemberRole.MEMBER,
        nullable=False,
    )

    organization: Mapped[Organization] = relationship(back_populates="members")
