"""
Brand kit model.

One brand kit per organization. Generation prompts are personalized from it,
so the cached copy is invalidated whenever it is edited.
"""

from typing import Any, TYPE_CHECKING

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mocah.core.db.models.base import BaseModel

if TYPE_CHECKING:
    from mocah.core.db.models.organization import Organization


class BrandKit(BaseModel):
    __tablename__ = "brand_kit"

    organization_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("organization.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Colors
    primary_color: Mapped[str | None] = mapped_column(String(32))
    accent_color: Mapped[str | None] = mapped_column(String(32))
    background_color: Mapped[str | None] = mapped_column(String(32))
    text_primary_color: Mapped[str | None] = mapped_column(String(32))

    # Typography and layout
    font_family: Mapped[str | None] = mapped_column(String(128))
    border_radius: Mapped[str | None] = mapped_column(String(32))

    # Images
    logo: Mapped[str | None] = mapped_column(Text)
    favicon: Mapped[str | None] = mapped_column(Text)

    # Personality
    brand_voice: Mapped[str | None] = mapped_column(Text)
    brand_tone: Mapped[str | None] = mapped_column(String(128))

    # Company info
    company_name: Mapped[str | None] = mapped_column(String(256))
    tagline: Mapped[str | None] = mapped_column(Text)
    website_url: Mapped[str | None] = mapped_column(Text)
    social_links: Mapped[dict[str, str] | None] = mapped_column(JSON)

    organization: Mapped["Organization"] = relationship(back_populates="brand_kit")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable view used by prompts and the cache."""
        return {
            "organizationId": self.organization_id,
            "primaryColor": self.primary_color,
            "accentColor": self.accent_color,
            "backgroundColor": self.background_color,
            "textPrimaryColor": self.text_primary_color,
            "fontFamily": self.font_family,
            "borderRadius": self.border_radius,
            "logo": self.logo,
            "favicon": self.favicon,
            "brandVoice": self.brand_voice,
            "brandTone": self.brand_tone,
            "companyName": self.company_name,
            "tagline": self.tagline,
            "websiteUrl": self.website_url,
            "socialLinks": self.social_links,
        }
