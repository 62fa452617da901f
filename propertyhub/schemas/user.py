"""
User and authentication schemas for request/response validation.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator
from typing import Optional, Tuple
from datetime import datetime

from propertyhub.models.user import UserRole
from propertyhub.schemas.common import CamelModel, OptionalStr, RequiredStr


def split_name(name: str) -> Tuple[str, str]:
    """Split a stored full name into first and last name."""
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class UserResponse(CamelModel):
    """
    User profile as returned by the API.

    The stored single `name` is also exposed split into first and last name.
    """

    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="firstName")
    @property
    def first_name(self) -> str:
        return split_name(self.name)[0]

    @computed_field(alias="lastName")
    @property
    def last_name(self) -> str:
        return split_name(self.name)[1]


class LoginUser(CamelModel):
    """User block of a successful login or sign-up."""

    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None
    token: str


class UserCreate(BaseModel):
    """
    Sign-up / admin user creation payload.

    Password length is checked by the auth service against the configured minimum.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: RequiredStr
    email: EmailStr
    password: RequiredStr
    role: UserRole = UserRole.USER
    phone: OptionalStr = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return UserRole.USER
        return v.strip().lower() if isinstance(v, str) else v


class UserUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: OptionalStr = None
    email: Optional[EmailStr] = None
    phone: OptionalStr = None
    profile_image: OptionalStr = Field(None, alias="profileImage")
    is_active: Optional[bool] = Field(None, alias="isActive")
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: RequiredStr
    password: RequiredStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ResetPasswordRequest(BaseModel):
    password: RequiredStr


class RoleUpdate(BaseModel):
    role: UserRole

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class CacheClearRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cache_key: Optional[str] = Field(None, alias="cacheKey")
