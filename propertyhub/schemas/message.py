"""
Pydantic schemas for contact-form messages.
"""

from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime

from propertyhub.models.message import MessageStatus
from propertyhub.schemas.common import CamelModel, OptionalStr, RequiredStr


class MessageResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    status: str
    source: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContactCreate(BaseModel):
    name: RequiredStr
    email: EmailStr
    subject: RequiredStr
    message: RequiredStr
    phone: OptionalStr = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class MessageUpdate(BaseModel):
    status: Optional[MessageStatus] = None
    notes: Optional[str] = None
