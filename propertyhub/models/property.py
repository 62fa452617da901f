"""
Property model for regular and off-plan listings.
Handles pricing, location, specifications and references to developers and agents.
"""

from sqlalchemy import String, Text, Integer, Float, Numeric, Boolean, JSON, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from propertyhub.database import Base
from propertyhub.config import settings
from decimal import Decimal
from typing import List, Optional
import enum


class PropertyStatus(str, enum.Enum):
    """Listing status."""
    FOR_SALE = "for-sale"
    FOR_RENT = "for-rent"
    SOLD = "sold"
    RENTED = "rented"


class Property(Base):
    """
    Property listing.
    Off-plan listings carry a bedroom range, payment plan and expected handover year
    in place of fixed area and bathroom figures.
    """

    __tablename__ = "properties"

    # Basic property information
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=14, scale=2),
        nullable=False,
        index=True,
        comment="Asking price or rent"
    )

    property_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="apartment, villa, townhouse, penthouse ..."
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PropertyStatus.FOR_SALE,
        index=True
    )

    is_offplan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    # Location
    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Community or area name"
    )
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Specifications
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    bathrooms: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    area: Mapped[float] = mapped_column(Float, nullable=False, default=0, comment="Area in square feet")
    bedroom_range: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    year_built: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Completion year, or expected handover year for off-plan"
    )
    payment_plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Media
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    features: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    main_image: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default=lambda: settings.default_property_image,
        comment="Cover image, never empty"
    )
    header_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # References
    developer_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("developers.id"),
        nullable=True,
        index=True
    )
    agent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
        index=True
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    def to_dict(self) -> dict:
        """
        Convert property to its storage-level dictionary.

        Returns:
            Dictionary keyed by column name
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "property_type": self.property_type,
            "status": self.status.value if isinstance(self.status, PropertyStatus) else self.status,
            "is_offplan": self.is_offplan,
            "location": self.location,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "bedroom_range": self.bedroom_range,
            "year_built": self.year_built,
            "payment_plan": self.payment_plan,
            "images": list(self.images or []),
            "features": list(self.features or []),
            "main_image": self.main_image or settings.default_property_image,
            "header_image": self.header_image,
            "developer_id": self.developer_id,
            "agent_id": self.agent_id,
            "featured": self.featured,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# Composite indexes for the common listing filters
type_status_index = Index(
    "idx_properties_type_status",
    Property.property_type,
    Property.status,
    Property.created_at.desc()
)

offplan_price_index = Index(
    "idx_properties_offplan_price",
    Property.is_offplan,
    Property.price
)
