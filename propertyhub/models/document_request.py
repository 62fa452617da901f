"""
Document request model: a visitor asking for brochures, floor plans or title deeds.
"""

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from typing import Optional
from datetime import datetime
import enum


class DocumentRequestStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    COMPLETED = "completed"


class DocumentRequest(Base):
    """Request for a property document, fulfilled by the back office."""

    __tablename__ = "document_requests"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    document_type: Mapped[str] = mapped_column(String(100), nullable=False)
    property_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    additional_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[DocumentRequestStatus] = mapped_column(
        SQLEnum(DocumentRequestStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DocumentRequestStatus.PENDING,
        index=True
    )
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "document_type": self.document_type,
            "property_reference": self.property_reference,
            "additional_info": self.additional_info,
            "status": self.status.value if isinstance(self.status, DocumentRequestStatus) else self.status,
            "source": self.source,
            "notes": self.notes,
            "assigned_to": self.assigned_to,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
