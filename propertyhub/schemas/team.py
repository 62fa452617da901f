"""
Pydantic schemas for team members.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime
import json

from propertyhub.schemas.common import CamelModel
from propertyhub.utils.exceptions import ValidationError
from propertyhub.utils.validators import parse_bool, parse_int


class TeamMemberResponse(CamelModel):
    id: int
    name: str
    position: str
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None
    social_links: Dict[str, Any] = {}
    is_active: bool
    is_leadership: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class TeamMemberWrite(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None
    social_links: Optional[Dict[str, Any]] = Field(None, alias="socialLinks")
    is_active: Optional[bool] = Field(None, alias="isActive")
    is_leadership: Optional[bool] = Field(None, alias="isLeadership")
    sort_order: Optional[int] = Field(None, alias="sortOrder")

    @field_validator("social_links", mode="before")
    @classmethod
    def parse_social_links(cls, v):
        """Form submissions carry the links as a JSON object string."""
        if v is None or isinstance(v, dict):
            return v
        if not str(v).strip():
            return None
        try:
            decoded = json.loads(v)
        except (TypeError, ValueError):
            raise ValidationError("socialLinks must be a JSON object")
        if not isinstance(decoded, dict):
            raise ValidationError("socialLinks must be a JSON object")
        return decoded

    @field_validator("is_active", "is_leadership", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return parse_bool(v)

    @field_validator("sort_order", mode="before")
    @classmethod
    def parse_sort_order(cls, v):
        return parse_int(v)
