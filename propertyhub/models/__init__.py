"""
Database models for the PropertyHub API.
"""

from propertyhub.models.user import User, UserRole
from propertyhub.models.developer import Developer
from propertyhub.models.property import Property, PropertyStatus
from propertyhub.models.inquiry import Inquiry, OffplanInquiry, InquiryStatus
from propertyhub.models.document_request import DocumentRequest, DocumentRequestStatus
from propertyhub.models.blog import BlogPost, BlogStatus
from propertyhub.models.testimonial import Testimonial, TestimonialStatus
from propertyhub.models.team import TeamMember
from propertyhub.models.message import Message, MessageStatus

__all__ = [
    "User",
    "UserRole",
    "Developer",
    "Property",
    "PropertyStatus",
    "Inquiry",
    "OffplanInquiry",
    "InquiryStatus",
    "DocumentRequest",
    "DocumentRequestStatus",
    "BlogPost",
    "BlogStatus",
    "Testimonial",
    "TestimonialStatus",
    "TeamMember",
    "Message",
    "MessageStatus",
]
