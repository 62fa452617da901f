"""
Lead-capture models: property inquiries and off-plan inquiries.
"""

from sqlalchemy import String, Text, Integer, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from typing import Optional
import enum


class InquiryStatus(str, enum.Enum):
    """Workflow status shared by both inquiry kinds."""
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


def _status_column():
    return mapped_column(
        SQLEnum(InquiryStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InquiryStatus.NEW,
        index=True
    )


class Inquiry(Base):
    """Inquiry about a listed property, or a general inquiry when no property is given."""

    __tablename__ = "inquiries"

    property_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("properties.id"),
        nullable=True,
        index=True
    )
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[InquiryStatus] = _status_column()
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "status": self.status.value if isinstance(self.status, InquiryStatus) else self.status,
            "source": self.source,
            "notes": self.notes,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class OffplanInquiry(Base):
    """Inquiry about an off-plan project, with language and mortgage preferences."""

    __tablename__ = "offplan_inquiries"

    property_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("properties.id"),
        nullable=True,
        index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_language: Mapped[str] = mapped_column(String(50), nullable=False, default="english")
    interested_in_mortgage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status: Mapped[InquiryStatus] = _status_column()
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "preferred_language": self.preferred_language,
            "interested_in_mortgage": self.interested_in_mortgage,
            "status": self.status.value if isinstance(self.status, InquiryStatus) else self.status,
            "source": self.source,
            "notes": self.notes,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
