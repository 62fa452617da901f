"""
User repository for authentication lookups and back-office user management.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, func
from propertyhub.repositories.base import BaseRepository
from propertyhub.models.user import User
from propertyhub.models.property import Property
from propertyhub.models.blog import BlogPost
from propertyhub.models.inquiry import Inquiry, OffplanInquiry
from propertyhub.models.document_request import DocumentRequest
from typing import Optional, Dict
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management operations.
    """

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(User, db, session_factory)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address, compared lower-cased

        Returns:
            User instance if found, None otherwise
        """
        return await self.get_by_field("email", email.strip().lower())

    async def get_by_reset_token(self, token: str) -> Optional[User]:
        return await self.get_by_field("reset_token", token)

    async def count_references(self, user_id: int) -> Dict[str, int]:
        """
        Count the rows that still point at a user.

        Args:
            user_id: ID of the user

        Returns:
            Mapping of related record kind to a non-zero count
        """
        statements = {
            "properties": select(func.count()).select_from(Property).where(Property.agent_id == user_id),
            "blog posts": select(func.count()).select_from(BlogPost).where(BlogPost.author_id == user_id),
            "inquiries": select(func.count()).select_from(Inquiry).where(
                (Inquiry.user_id == user_id) | (Inquiry.assigned_to == user_id)
            ),
            "off-plan inquiries": select(func.count()).select_from(OffplanInquiry).where(
                OffplanInquiry.assigned_to == user_id
            ),
            "document requests": select(func.count()).select_from(DocumentRequest).where(
                DocumentRequest.assigned_to == user_id
            ),
        }
        counts = await self.gather_reads(*[self.fetch_scalar(stmt) for stmt in statements.values()])
        return {kind: count for kind, count in zip(statements, counts) if count}
