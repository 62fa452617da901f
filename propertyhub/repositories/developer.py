"""
Developer repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, func
from propertyhub.repositories.base import BaseRepository
from propertyhub.models.developer import Developer
from propertyhub.models.property import Property
from typing import Optional, List, Tuple
import logging

logger = logging.getLogger(__name__)


class DeveloperRepository(BaseRepository[Developer]):

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(Developer, db, session_factory)

    async def get_by_slug(self, slug: str) -> Optional[Developer]:
        return await self.get_by_field("slug", slug)

    async def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count()).select_from(Developer).where(Developer.slug == slug)
        if exclude_id is not None:
            query = query.where(Developer.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def list_active_with_property_counts(self) -> List[Tuple[Developer, int]]:
        """
        Active developers ordered by name, each with its number of properties.

        Returns:
            List of (developer, property count) pairs
        """
        try:
            query = (
                select(Developer, func.count(Property.id))
                .outerjoin(Property, Property.developer_id == Developer.id)
                .where(Developer.is_active.is_(True))
                .group_by(Developer.id)
                .order_by(Developer.name.asc())
            )
            result = await self.db.execute(query)
            rows = [(developer, count) for developer, count in result.all()]
            logger.debug(f"Retrieved {len(rows)} active developers")
            return rows
        except Exception as e:
            logger.error(f"Failed to list developers: {e}")
            raise
