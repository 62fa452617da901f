"""
Pydantic schemas for testimonials.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import Optional
from datetime import datetime

from propertyhub.models.testimonial import TestimonialStatus
from propertyhub.schemas.common import CamelModel
from propertyhub.utils.validators import parse_bool, parse_int


class TestimonialResponse(CamelModel):
    """
    Testimonial as shown on the site.

    `quote` mirrors the stored content and `role` the position, falling back to
    "Customer". Featured testimonials sort first through `order`.
    """

    id: int
    name: str
    content: str
    position: Optional[str] = None
    company: Optional[str] = None
    rating: int
    image: Optional[str] = None
    featured: bool
    is_active: bool
    status: str
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def quote(self) -> str:
        return self.content

    @computed_field
    @property
    def role(self) -> str:
        return self.position or "Customer"

    @computed_field
    @property
    def order(self) -> int:
        return 1 if self.featured else 2


class TestimonialWrite(BaseModel):
    """Testimonial form fields; the site form sends `quote` and `role`."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, validation_alias=AliasChoices("quote", "content"))
    position: Optional[str] = Field(None, validation_alias=AliasChoices("role", "position"))
    company: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    image: Optional[str] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = Field(None, validation_alias=AliasChoices("isActive", "is_active"))
    status: Optional[TestimonialStatus] = None

    @field_validator("rating", mode="before")
    @classmethod
    def parse_rating(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return parse_int(v) if v is not None else None

    @field_validator("featured", "is_active", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return parse_bool(v)
