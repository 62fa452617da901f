"""
FastAPI dependency injection utilities for authentication, services and request parsing.
Provides reusable dependencies for route protection and user extraction.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.datastructures import UploadFile
from propertyhub.database import get_db, get_session_factory
from propertyhub.models.user import User, UserRole
from propertyhub.schemas.blog import BlogListParams
from propertyhub.schemas.common import AdminListParams
from propertyhub.schemas.property import PropertySearchFilters
from propertyhub.services.auth import AuthService
from propertyhub.services.blog import BlogService
from propertyhub.services.content import TeamService, TestimonialService
from propertyhub.services.developer import DeveloperService
from propertyhub.services.inquiry import DocumentRequestService, InquiryService, MessageService
from propertyhub.services.property import PropertyService
from propertyhub.services.storage import ObjectStorage, get_object_storage
from propertyhub.utils.exceptions import (
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> AuthService:
    return AuthService(db, session_factory)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: ObjectStorage = Depends(get_object_storage)
) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session for writes
        session_factory: Factory for concurrent read sessions
        storage: Image storage

    Returns:
        PropertyService instance
    """
    return PropertyService(db, session_factory, storage)


async def get_developer_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: ObjectStorage = Depends(get_object_storage)
) -> DeveloperService:
    return DeveloperService(db, session_factory, storage)


async def get_blog_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: ObjectStorage = Depends(get_object_storage)
) -> BlogService:
    return BlogService(db, session_factory, storage)


async def get_inquiry_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> InquiryService:
    return InquiryService(db, session_factory)


async def get_offplan_inquiry_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> InquiryService:
    return InquiryService(db, session_factory, offplan=True)


async def get_document_request_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> DocumentRequestService:
    return DocumentRequestService(db, session_factory)


async def get_message_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> MessageService:
    return MessageService(db, session_factory)


async def get_testimonial_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: ObjectStorage = Depends(get_object_storage)
) -> TestimonialService:
    return TestimonialService(db, session_factory, storage)


async def get_team_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: ObjectStorage = Depends(get_object_storage)
) -> TeamService:
    return TeamService(db, session_factory, storage)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided
        InvalidTokenError: If token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user with admin role.

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    if current_user.role != UserRole.ADMIN:
        raise InsufficientPermissionsError("access admin resources")

    return current_user


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Current user when a bearer token is sent, None otherwise.

    A token that is sent but invalid is still rejected.
    """
    if not credentials:
        return None

    return await auth_service.get_current_user(credentials.credentials)


async def property_filters(request: Request) -> PropertySearchFilters:
    """Listing filters parsed leniently from the raw query string."""
    return PropertySearchFilters.from_query(request.query_params)


async def admin_list_params(request: Request) -> AdminListParams:
    return AdminListParams.model_validate(dict(request.query_params))


async def blog_list_params(request: Request) -> BlogListParams:
    return BlogListParams.model_validate(dict(request.query_params))


@dataclass
class FormPayload:
    """
    A multipart or urlencoded form split into text fields and file uploads.

    Blank text fields are dropped, and so are file inputs submitted without a file.
    """

    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, List[UploadFile]] = field(default_factory=dict)

    def file(self, name: str) -> Optional[UploadFile]:
        uploads = self.files.get(name)
        return uploads[0] if uploads else None

    def file_list(self, name: str) -> List[UploadFile]:
        return list(self.files.get(name, []))


async def form_payload(request: Request) -> FormPayload:
    form = await request.form()
    payload = FormPayload()
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            if value.filename:
                payload.files.setdefault(name, []).append(value)
        elif value.strip():
            payload.fields[name] = value
    return payload
