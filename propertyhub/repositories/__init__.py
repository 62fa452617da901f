"""
Repository layer for data access operations.
"""

from propertyhub.repositories.base import BaseRepository
from propertyhub.repositories.content import (
    BlogRepository,
    DocumentRequestRepository,
    InquiryRepository,
    MessageRepository,
    OffplanInquiryRepository,
    TeamRepository,
    TestimonialRepository,
)
from propertyhub.repositories.developer import DeveloperRepository
from propertyhub.repositories.property import PropertyRepository
from propertyhub.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "BlogRepository",
    "DocumentRequestRepository",
    "InquiryRepository",
    "MessageRepository",
    "OffplanInquiryRepository",
    "TeamRepository",
    "TestimonialRepository",
    "DeveloperRepository",
    "PropertyRepository",
    "UserRepository",
]
