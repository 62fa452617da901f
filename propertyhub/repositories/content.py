"""
Repositories for lead capture (inquiries, document requests, messages) and site content
(blog posts, testimonials, team members).
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, and_, or_
from propertyhub.repositories.base import BaseRepository
from propertyhub.models.inquiry import Inquiry, OffplanInquiry
from propertyhub.models.document_request import DocumentRequest
from propertyhub.models.message import Message
from propertyhub.models.blog import BlogPost, BlogStatus
from propertyhub.models.testimonial import Testimonial
from propertyhub.models.team import TeamMember
from propertyhub.schemas.blog import BlogListParams
from typing import Optional, List, Tuple
import logging

logger = logging.getLogger(__name__)


class InquiryRepository(BaseRepository[Inquiry]):
    SEARCH_FIELDS = ("name", "email", "phone")

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(Inquiry, db, session_factory)


class OffplanInquiryRepository(BaseRepository[OffplanInquiry]):
    SEARCH_FIELDS = ("name", "email", "phone")

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(OffplanInquiry, db, session_factory)


class DocumentRequestRepository(BaseRepository[DocumentRequest]):
    SEARCH_FIELDS = ("name", "email", "phone")

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(DocumentRequest, db, session_factory)


class MessageRepository(BaseRepository[Message]):
    SEARCH_FIELDS = ("name", "email", "subject")

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(Message, db, session_factory)


class BlogRepository(BaseRepository[BlogPost]):
    """
    Blog posts. Public reads only ever see published posts.
    """

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(BlogPost, db, session_factory)

    @staticmethod
    def _published():
        return BlogPost.status == BlogStatus.PUBLISHED

    def _newest_published(self, limit: int, *conditions):
        return (
            select(BlogPost)
            .where(and_(self._published(), *conditions))
            .order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
            .limit(limit)
        )

    async def list_published(self, params: BlogListParams) -> Tuple[List[BlogPost], int]:
        """
        Page of published posts.

        Args:
            params: Validated listing parameters

        Returns:
            Tuple of (posts, total count)
        """
        try:
            conditions = [self._published()]
            if params.featured is not None:
                conditions.append(BlogPost.featured == params.featured)
            if params.search:
                conditions.append(or_(
                    BlogPost.title.icontains(params.search, autoescape=True),
                    BlogPost.excerpt.icontains(params.search, autoescape=True),
                    BlogPost.content.icontains(params.search, autoescape=True),
                ))
            column = getattr(BlogPost, params.sort_by)
            ordering = [column.asc() if params.sort_order == "asc" else column.desc(), BlogPost.id.desc()]
            return await self.paginate(conditions, ordering, params.offset, params.limit)
        except Exception as e:
            logger.error(f"Failed to list blog posts: {e}")
            raise

    async def get_recent(self, limit: int) -> List[BlogPost]:
        return await self.fetch_all(self._newest_published(limit))

    async def get_featured(self, limit: int) -> List[BlogPost]:
        return await self.fetch_all(self._newest_published(limit, BlogPost.featured.is_(True)))

    async def published_tags(self) -> List[Optional[str]]:
        """Raw comma-separated tag text of every published post."""
        result = await self.db.execute(select(BlogPost.tags).where(self._published()))
        return list(result.scalars().all())

    async def published_categories(self) -> List[Optional[str]]:
        result = await self.db.execute(select(BlogPost.category).where(self._published()))
        return list(result.scalars().all())


class TestimonialRepository(BaseRepository[Testimonial]):

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(Testimonial, db, session_factory)

    async def list_all(self) -> List[Testimonial]:
        """Every testimonial, newest first."""
        return await self.get_multi(limit=1000)


class TeamRepository(BaseRepository[TeamMember]):

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(TeamMember, db, session_factory)

    async def list_active(self) -> List[TeamMember]:
        """Active members ordered by name."""
        return await self.get_multi(limit=1000, filters={"is_active": True}, order_by="name")
