"""
Service layer for business logic implementation.
Contains services for listings, leads, site content, authentication and error handling.
"""

from .auth import AuthService
from .blog import BlogService
from .content import TeamService, TestimonialService
from .developer import DeveloperService
from .enrichment import RelatedEntityEnricher, RelationSpec
from .error_handler import ErrorHandlerService
from .inquiry import DocumentRequestService, InquiryService, MessageService
from .property import PropertyService
from .storage import LocalObjectStorage, ObjectStorage

__all__ = [
    "AuthService",
    "BlogService",
    "TeamService",
    "TestimonialService",
    "DeveloperService",
    "RelatedEntityEnricher",
    "RelationSpec",
    "ErrorHandlerService",
    "DocumentRequestService",
    "InquiryService",
    "MessageService",
    "PropertyService",
    "LocalObjectStorage",
    "ObjectStorage",
]
