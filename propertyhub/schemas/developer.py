"""
Pydantic schemas for developer requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

from propertyhub.schemas.common import CamelModel
from propertyhub.schemas.property import PropertyResponse
from propertyhub.utils.validators import parse_bool, parse_int


class DeveloperResponse(CamelModel):
    id: int
    name: str
    slug: str
    logo: Optional[str] = None
    background_image: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    established: Optional[int] = None
    headquarters: Optional[str] = None
    featured: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DeveloperListItem(DeveloperResponse):
    """Active developer with the number of properties it owns."""

    property_count: int = 0


class DeveloperDetailResponse(DeveloperResponse):
    properties: List[PropertyResponse] = []


class DeveloperWrite(BaseModel):
    """Developer form fields. Uploaded logo and background URLs are merged in by the route."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    website: Optional[str] = None
    established: Optional[int] = None
    headquarters: Optional[str] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    logo: Optional[str] = None
    background_image: Optional[str] = Field(None, alias="backgroundImage")

    @field_validator("established", mode="before")
    @classmethod
    def parse_year(cls, v):
        return parse_int(v)

    @field_validator("featured", "is_active", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return parse_bool(v)
