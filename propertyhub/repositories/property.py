"""
Property repository for listing search, featured and similar-property lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, and_, or_, func
from propertyhub.repositories.base import BaseRepository
from propertyhub.models.property import Property
from propertyhub.models.inquiry import Inquiry, OffplanInquiry
from propertyhub.schemas.property import PropertySearchFilters
from typing import Optional, List, Any, Tuple
import logging

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "description", "location", "address", "city")


def build_filter_conditions(filters: PropertySearchFilters) -> List[Any]:
    """
    Build SQLAlchemy filter conditions from search filters.

    Each filter that is set contributes exactly one predicate.

    Args:
        filters: Validated listing filters

    Returns:
        List of SQLAlchemy conditions
    """
    conditions = []

    # Exact matches
    if filters.property_type:
        conditions.append(Property.property_type == filters.property_type)
    if filters.status:
        conditions.append(Property.status == filters.status)
    if filters.is_offplan is not None:
        conditions.append(Property.is_offplan == filters.is_offplan)
    if filters.featured is not None:
        conditions.append(Property.featured == filters.featured)
    if filters.developer_id is not None:
        conditions.append(Property.developer_id == filters.developer_id)
    if filters.year_built is not None:
        conditions.append(Property.year_built == filters.year_built)

    # Price range filters
    if filters.min_price is not None:
        conditions.append(Property.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Property.price <= filters.max_price)

    # Minimum room counts
    if filters.bedrooms is not None:
        conditions.append(Property.bedrooms >= filters.bedrooms)
    if filters.bathrooms is not None:
        conditions.append(Property.bathrooms >= filters.bathrooms)

    # Area filters
    if filters.min_area is not None:
        conditions.append(Property.area >= filters.min_area)
    if filters.max_area is not None:
        conditions.append(Property.area <= filters.max_area)

    # Location filter (case-insensitive partial match)
    if filters.location:
        conditions.append(Property.location.icontains(filters.location, autoescape=True))

    # Free text across the descriptive columns
    if filters.search:
        conditions.append(
            or_(*[
                getattr(Property, field).icontains(filters.search, autoescape=True)
                for field in SEARCH_FIELDS
            ])
        )

    return conditions


def build_ordering(filters: PropertySearchFilters) -> List[Any]:
    column = getattr(Property, filters.sort_by)
    primary = column.asc() if filters.sort_order == "asc" else column.desc()
    return [primary, Property.id.desc()]


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    """

    def __init__(self, db: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(Property, db, session_factory)

    async def search(self, filters: PropertySearchFilters) -> Tuple[List[Property], int]:
        """
        Search properties with filtering, ordering and pagination.

        The page and the total count are computed under the same predicates.

        Args:
            filters: Validated listing filters

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            conditions = build_filter_conditions(filters)
            properties, total = await self.paginate(
                conditions, build_ordering(filters), filters.offset, filters.limit
            )
            logger.debug(
                f"Property search returned {len(properties)} of {total} total results",
                extra={"predicates": len(conditions)}
            )
            return properties, total
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def get_featured(self, limit: int) -> List[Property]:
        query = (
            select(Property)
            .where(Property.featured.is_(True))
            .order_by(Property.created_at.desc(), Property.id.desc())
            .limit(limit)
        )
        return await self.fetch_all(query)

    async def get_similar(self, property_obj: Property, limit: int = 4) -> List[Property]:
        """
        Same-type properties priced within 20% of the given one, newest first.

        Args:
            property_obj: Reference property
            limit: Maximum number of results

        Returns:
            List of similar properties, never including the reference itself
        """
        price = float(property_obj.price)
        query = (
            select(Property)
            .where(and_(
                Property.property_type == property_obj.property_type,
                Property.price >= price * 0.8,
                Property.price <= price * 1.2,
                Property.id != property_obj.id,
            ))
            .order_by(Property.created_at.desc(), Property.id.desc())
            .limit(limit)
        )
        return await self.fetch_all(query)

    async def get_by_developer(self, developer_id: int) -> List[Property]:
        query = (
            select(Property)
            .where(Property.developer_id == developer_id)
            .order_by(Property.created_at.desc(), Property.id.desc())
        )
        return await self.fetch_all(query)

    async def count_inquiries(self, property_id: int) -> int:
        """Inquiries and off-plan inquiries that reference the property."""
        inquiries, offplan = await self.gather_reads(
            self.fetch_scalar(select(func.count()).select_from(Inquiry).where(Inquiry.property_id == property_id)),
            self.fetch_scalar(
                select(func.count()).select_from(OffplanInquiry).where(OffplanInquiry.property_id == property_id)
            ),
        )
        return inquiries + offplan

    async def count_for_developer(self, developer_id: int) -> int:
        return await self.count({"developer_id": developer_id})

    async def count_for_agent(self, agent_id: int) -> int:
        return await self.count({"agent_id": agent_id})
