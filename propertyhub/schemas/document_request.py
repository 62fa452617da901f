"""
Pydantic schemas for document requests.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from propertyhub.models.document_request import DocumentRequestStatus
from propertyhub.schemas.common import CamelModel, OptionalStr, RequiredStr


class DocumentRequestResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    document_type: str
    property_reference: Optional[str] = None
    additional_info: Optional[str] = None
    status: str
    source: str
    notes: Optional[str] = None
    assigned_to: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class DocumentRequestCreate(BaseModel):
    """Public request form. Name, email, phone and document type are required."""

    model_config = ConfigDict(populate_by_name=True)

    name: RequiredStr
    email: EmailStr
    phone: RequiredStr
    document_type: RequiredStr = Field(..., alias="documentType")
    property_reference: OptionalStr = Field(None, alias="propertyReference")
    additional_info: OptionalStr = Field(None, alias="additionalInfo")
    source: OptionalStr = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class DocumentRequestUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[DocumentRequestStatus] = None
    notes: Optional[str] = None
    assigned_to: Optional[int] = Field(None, alias="assignedTo")
    completed_at: Optional[datetime] = Field(None, alias="completedAt")
