"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, func, and_, or_
from sqlalchemy.sql import Select
from propertyhub.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Sequence, Tuple, Iterable
import asyncio
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.

    Writes go through the request session. Read fan-outs (page + count, enrichment
    batches) run concurrently on sessions opened from `session_factory` when one is
    given, and sequentially on the request session otherwise.
    """

    def __init__(
        self,
        model: Type[ModelType],
        db: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None
    ):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
            session_factory: Optional factory for independent read sessions
        """
        self.model = model
        self.db = db
        self.session_factory = session_factory

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: ID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
            obj = result.scalar_one_or_none()

            if obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get the first record whose `field` equals `value`.

        Args:
            field: Column name
            value: Value to match

        Returns:
            Model instance if found, None otherwise
        """
        try:
            result = await self.db.execute(
                select(self.model).where(getattr(self.model, field) == value).limit(1)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by {field}: {e}")
            raise

    async def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None
    ) -> List[ModelType]:
        """
        Get multiple records with optional equality filters, pagination and ordering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            filters: Dictionary of field filters
            order_by: Field name to order by (prefix with '-' for descending)

        Returns:
            List of model instances
        """
        try:
            query = select(self.model)
            conditions = self._equality_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
            query = query.order_by(*self._ordering(order_by)).offset(skip).limit(limit)

            result = await self.db.execute(query)
            objects = list(result.scalars().all())

            logger.debug(f"Retrieved {len(objects)} {self.model.__name__} records")
            return objects
        except Exception as e:
            logger.error(f"Failed to get multiple {self.model.__name__} records: {e}")
            raise

    async def update(self, id: int, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update the given fields of a record.

        Only keys present in `obj_in` are written; a None value clears the column.

        Args:
            id: ID of the record to update
            obj_in: Dictionary of field values to update

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = await self.get_by_id(id)
            if db_obj is None:
                return None

            for field, value in obj_in.items():
                setattr(db_obj, field, value)

            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    async def delete(self, id: int) -> bool:
        """
        Delete a record by its ID.

        Args:
            id: ID of the record to delete

        Returns:
            True if a record was deleted, False if it did not exist
        """
        try:
            db_obj = await self.get_by_id(id)
            if db_obj is None:
                return False

            await self.db.delete(db_obj)
            await self.db.commit()
            logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records matching equality filters.
        """
        try:
            query = select(func.count()).select_from(self.model)
            conditions = self._equality_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
            result = await self.db.execute(query)
            return result.scalar_one()
        except Exception as e:
            logger.error(f"Failed to count {self.model.__name__} records: {e}")
            raise

    async def exists(self, id: int) -> bool:
        return await self.count({"id": id}) > 0

    async def paginate(
        self,
        conditions: Sequence[Any],
        order_by: Sequence[Any],
        offset: int,
        limit: int
    ) -> Tuple[List[ModelType], int]:
        """
        Fetch one page of rows and the total row count under the same predicates.

        Args:
            conditions: SQLAlchemy predicate expressions, AND-ed together
            order_by: Ordering expressions
            offset: Rows to skip
            limit: Page size

        Returns:
            Tuple of (page rows, total matching rows)
        """
        page_query = select(self.model)
        count_query = select(func.count()).select_from(self.model)
        if conditions:
            page_query = page_query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))
        page_query = page_query.order_by(*order_by).offset(offset).limit(limit)

        rows, total = await self.gather_reads(
            self.fetch_all(page_query),
            self.fetch_scalar(count_query),
        )
        logger.debug(f"Paginated {self.model.__name__}: {len(rows)} of {total}")
        return rows, total

    async def admin_page(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        search_fields: Sequence[str] = (),
        filters: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[ModelType], int]:
        """
        Newest-first page for back-office lists.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring matched against any of `search_fields`
            search_fields: Column names searched by `search`
            filters: Equality filters; None values are ignored

        Returns:
            Tuple of (page rows, total matching rows)
        """
        conditions = self._equality_conditions(filters)
        if search and search_fields:
            conditions.append(or_(*[
                getattr(self.model, field).icontains(search, autoescape=True)
                for field in search_fields
            ]))
        return await self.paginate(conditions, self._ordering(None), (page - 1) * limit, limit)

    async def gather_reads(self, *reads):
        """
        Await independent read coroutines.
        They share no session only when a session factory is available.
        """
        if self.session_factory is not None:
            return await asyncio.gather(*reads)
        return [await read for read in reads]

    async def fetch_all(self, statement: Select) -> List[Any]:
        """Execute a select and return every scalar."""
        if self.session_factory is None:
            result = await self.db.execute(statement)
            return list(result.scalars().all())
        async with self.session_factory() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def fetch_scalar(self, statement: Select) -> Any:
        if self.session_factory is None:
            result = await self.db.execute(statement)
            return result.scalar_one()
        async with self.session_factory() as session:
            result = await session.execute(statement)
            return result.scalar_one()

    async def fetch_mappings(self, statement: Select) -> List[Dict[str, Any]]:
        """Execute a column select and return each row as a dict."""
        if self.session_factory is None:
            result = await self.db.execute(statement)
            return [dict(row) for row in result.mappings().all()]
        async with self.session_factory() as session:
            result = await session.execute(statement)
            return [dict(row) for row in result.mappings().all()]

    async def get_summaries(self, ids: Iterable[int], columns: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Batched `WHERE id IN (...)` fetch of a few columns, used by enrichment.

        Args:
            ids: Distinct record IDs
            columns: Column names to select

        Returns:
            One dict per matching record
        """
        id_list = list(ids)
        if not id_list:
            return []
        statement = select(*[getattr(self.model, column) for column in columns]).where(
            self.model.id.in_(id_list)
        )
        return await self.fetch_mappings(statement)

    def _equality_conditions(self, filters: Optional[Dict[str, Any]]) -> List[Any]:
        conditions = []
        for field, value in (filters or {}).items():
            if value is None or not hasattr(self.model, field):
                continue
            column = getattr(self.model, field)
            conditions.append(column.in_(value) if isinstance(value, list) else column == value)
        return conditions

    def _ordering(self, order_by: Optional[str]) -> List[Any]:
        if order_by:
            descending = order_by.startswith("-")
            field_name = order_by.lstrip("-")
            if hasattr(self.model, field_name):
                column = getattr(self.model, field_name)
                return [column.desc() if descending else column.asc(), self.model.id.desc()]
        # Default ordering by created_at descending
        return [self.model.created_at.desc(), self.model.id.desc()]
