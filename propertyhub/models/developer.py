"""
Developer model for real-estate developers behind off-plan and ready projects.
"""

from sqlalchemy import String, Text, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from typing import Optional


class Developer(Base):
    """Real-estate developer with a unique URL slug."""

    __tablename__ = "developers"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Developer display name"
    )

    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-safe unique identifier"
    )

    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    background_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    established: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Year founded")
    headquarters: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "logo": self.logo,
            "background_image": self.background_image,
            "description": self.description,
            "website": self.website,
            "established": self.established,
            "headquarters": self.headquarters,
            "featured": self.featured,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
