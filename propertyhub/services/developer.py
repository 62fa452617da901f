"""
Developer service: developer pages, slugs and delete protection.
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from fastapi import UploadFile
from propertyhub.repositories.developer import DeveloperRepository
from propertyhub.repositories.property import PropertyRepository
from propertyhub.models.developer import Developer
from propertyhub.schemas.developer import (
    DeveloperDetailResponse,
    DeveloperListItem,
    DeveloperResponse,
    DeveloperWrite,
)
from propertyhub.services.property import PropertyService
from propertyhub.services.storage import ObjectStorage
from propertyhub.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    MissingFieldsError,
    NotFoundError,
    RelatedRecordsError,
)
from propertyhub.utils.formatting import slugify
import logging

logger = logging.getLogger(__name__)


class DeveloperService:

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        storage: Optional[ObjectStorage] = None
    ):
        self.storage = storage
        self.developer_repo = DeveloperRepository(db_session, session_factory)
        self.property_repo = PropertyRepository(db_session, session_factory)
        self.property_service = PropertyService(db_session, session_factory, storage)

    async def list_active(self) -> List[Dict[str, Any]]:
        """Active developers ordered by name, each with `propertyCount`."""
        rows = await self.developer_repo.list_active_with_property_counts()
        return [
            DeveloperListItem.model_validate({**developer.to_dict(), "property_count": count}).to_response()
            for developer, count in rows
        ]

    async def get_developer(self, developer_id: int) -> Developer:
        developer = await self.developer_repo.get_by_id(developer_id)
        if not developer:
            raise NotFoundError("Developer", developer_id)
        return developer

    async def get_developer_detail(self, developer_id: int) -> Dict[str, Any]:
        return await self._detail(await self.get_developer(developer_id))

    async def get_developer_by_slug(self, slug: str) -> Dict[str, Any]:
        developer = await self.developer_repo.get_by_slug(slug)
        if not developer:
            raise NotFoundError("Developer", slug)
        return await self._detail(developer)

    async def create_developer(
        self,
        developer_data: DeveloperWrite,
        logo: Optional[UploadFile] = None,
        background_image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Create a developer. The slug is generated from the name when not given.

        Raises:
            MissingFieldsError: If name (or a usable slug) is missing
            DuplicateResourceError: If the slug is taken
        """
        create_data = developer_data.model_dump(exclude_none=True)
        if not create_data.get("name"):
            raise MissingFieldsError(["name"])
        create_data["slug"] = slugify(create_data.get("slug") or create_data["name"])
        if not create_data["slug"]:
            raise MissingFieldsError(["slug"])
        create_data.setdefault("featured", False)
        create_data.setdefault("is_active", True)

        if await self.developer_repo.slug_taken(create_data["slug"]):
            raise DuplicateResourceError("Developer", "slug")

        uploaded = await self._upload(create_data, logo, background_image)
        try:
            developer = await self.developer_repo.create(create_data)
        except Exception:
            await self._discard(uploaded)
            raise

        logger.info(f"Developer created: {developer.name} (ID: {developer.id})")
        return DeveloperResponse.model_validate(developer.to_dict()).to_response()

    async def update_developer(
        self,
        developer_id: int,
        developer_data: DeveloperWrite,
        logo: Optional[UploadFile] = None,
        background_image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        await self.get_developer(developer_id)

        update_data = developer_data.model_dump(exclude_none=True)
        if not update_data and not logo and not background_image:
            raise BadRequestError("No valid fields to update")

        if "slug" in update_data:
            update_data["slug"] = slugify(update_data["slug"])
            if await self.developer_repo.slug_taken(update_data["slug"], exclude_id=developer_id):
                raise DuplicateResourceError("Developer", "slug")

        uploaded = await self._upload(update_data, logo, background_image)
        try:
            developer = await self.developer_repo.update(developer_id, update_data)
        except Exception:
            await self._discard(uploaded)
            raise

        logger.info(f"Developer updated: {developer_id}")
        return DeveloperResponse.model_validate(developer.to_dict()).to_response()

    async def delete_developer(self, developer_id: int) -> None:
        """
        Raises:
            NotFoundError: If developer doesn't exist
            RelatedRecordsError: If properties still reference the developer
        """
        await self.get_developer(developer_id)

        if await self.property_repo.count_for_developer(developer_id):
            raise RelatedRecordsError("Developer", "properties")

        await self.developer_repo.delete(developer_id)
        logger.info(f"Developer deleted: {developer_id}")

    async def _detail(self, developer: Developer) -> Dict[str, Any]:
        properties = await self.property_repo.get_by_developer(developer.id)
        return DeveloperDetailResponse.model_validate({
            **developer.to_dict(),
            "properties": await self.property_service.present(properties),
        }).to_response()

    async def _upload(
        self,
        data: Dict[str, Any],
        logo: Optional[UploadFile],
        background_image: Optional[UploadFile]
    ) -> List[str]:
        uploaded: List[str] = []
        try:
            if logo:
                data["logo"] = await self.storage.upload("developers/logos", logo)
                uploaded.append(data["logo"])
            if background_image:
                data["background_image"] = await self.storage.upload("developers/backgrounds", background_image)
                uploaded.append(data["background_image"])
        except Exception:
            await self._discard(uploaded)
            raise
        return uploaded

    async def _discard(self, urls: List[str]) -> None:
        if urls and self.storage:
            await self.storage.delete_many(urls)
