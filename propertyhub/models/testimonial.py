"""
Client testimonial model.
"""

from sqlalchemy import String, Text, Integer, Boolean, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from typing import Optional
import enum


class TestimonialStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"


class Testimonial(Base):
    __tablename__ = "testimonials"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_testimonials_rating"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    status: Mapped[TestimonialStatus] = mapped_column(
        SQLEnum(TestimonialStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TestimonialStatus.PENDING
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "position": self.position,
            "company": self.company,
            "rating": self.rating,
            "image": self.image,
            "featured": self.featured,
            "is_active": self.is_active,
            "status": self.status.value if isinstance(self.status, TestimonialStatus) else self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
