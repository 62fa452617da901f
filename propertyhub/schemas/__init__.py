"""
Pydantic schemas for request/response validation.
"""

from .common import AdminListParams, AdminPagination, CamelModel, listing_pagination
from .property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyResponse,
    PropertySearchFilters,
    PropertyUpdate,
)
from .developer import DeveloperResponse, DeveloperWrite
from .blog import BlogListParams, BlogPostResponse, BlogPostWrite
from .user import LoginRequest, UserCreate, UserResponse, UserUpdate

__all__ = [
    "AdminListParams",
    "AdminPagination",
    "CamelModel",
    "listing_pagination",
    "PropertyCreate",
    "PropertyDetailResponse",
    "PropertyResponse",
    "PropertySearchFilters",
    "PropertyUpdate",
    "DeveloperResponse",
    "DeveloperWrite",
    "BlogListParams",
    "BlogPostResponse",
    "BlogPostWrite",
    "LoginRequest",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
