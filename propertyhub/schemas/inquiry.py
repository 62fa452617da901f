"""
Pydantic schemas for property and off-plan inquiries.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from propertyhub.models.inquiry import InquiryStatus
from propertyhub.schemas.common import CamelModel, OptionalStr, RequiredStr


class InquiryResponse(CamelModel):
    id: int
    property_id: Optional[int] = None
    user_id: Optional[int] = None
    name: str
    email: str
    phone: str
    message: str
    status: str
    source: str
    notes: Optional[str] = None
    assigned_to: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class OffplanInquiryResponse(CamelModel):
    id: int
    property_id: Optional[int] = None
    name: str
    email: str
    phone: str
    message: Optional[str] = None
    preferred_language: str
    interested_in_mortgage: bool
    status: str
    source: str
    notes: Optional[str] = None
    assigned_to: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class InquiryCreate(BaseModel):
    """Public inquiry form. Name, email, phone and message are required."""

    model_config = ConfigDict(populate_by_name=True)

    name: RequiredStr
    email: EmailStr
    phone: RequiredStr
    message: RequiredStr
    property_id: Optional[int] = Field(None, alias="propertyId")
    source: OptionalStr = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class OffplanInquiryCreate(InquiryCreate):
    preferred_language: OptionalStr = Field(None, alias="preferredLanguage")
    interested_in_mortgage: bool = Field(False, alias="interestedInMortgage")


class InquiryUpdate(BaseModel):
    """Back-office update; only workflow fields can change."""

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[InquiryStatus] = None
    notes: Optional[str] = None
    assigned_to: Optional[int] = Field(None, alias="assignedTo")
