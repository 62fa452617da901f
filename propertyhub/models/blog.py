"""
Blog post model.
"""

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from datetime import datetime
from typing import List, Optional
import enum


class BlogStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class BlogPost(Base):
    """Blog article. Only published posts are visible on public routes."""

    __tablename__ = "blog_posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    tags: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Comma-separated tag names"
    )

    status: Mapped[BlogStatus] = mapped_column(
        SQLEnum(BlogStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BlogStatus.DRAFT,
        index=True
    )
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    author_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    @property
    def tag_list(self) -> List[str]:
        return [tag.strip() for tag in (self.tags or "").split(",") if tag.strip()]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "excerpt": self.excerpt,
            "category": self.category,
            "tags": self.tag_list,
            "status": self.status.value if isinstance(self.status, BlogStatus) else self.status,
            "featured": self.featured,
            "image": self.image,
            "view_count": self.view_count,
            "published_at": self.published_at,
            "author_id": self.author_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
