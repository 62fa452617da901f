"""
Property service for listing search, detail pages and property management.
Handles enrichment with developer and agent summaries, image uploads and
delete protection.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from fastapi import UploadFile
from propertyhub.config import settings
from propertyhub.repositories.property import PropertyRepository
from propertyhub.repositories.developer import DeveloperRepository
from propertyhub.repositories.user import UserRepository
from propertyhub.models.property import Property
from propertyhub.schemas.property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyResponse,
    PropertySearchFilters,
    PropertyUpdate,
)
from propertyhub.services.enrichment import RelatedEntityEnricher, RelationSpec, summary_loader
from propertyhub.services.storage import ObjectStorage
from propertyhub.utils.exceptions import NotFoundError, BadRequestError, RelatedRecordsError
import logging

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "properties"
HEADER_FOLDER = "properties/headers"


class PropertyService:
    """
    Property service for listings and property management.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        storage: Optional[ObjectStorage] = None
    ):
        self.db = db_session
        self.storage = storage
        self.property_repo = PropertyRepository(db_session, session_factory)
        self.developer_repo = DeveloperRepository(db_session, session_factory)
        self.user_repo = UserRepository(db_session, session_factory)
        self.enricher = RelatedEntityEnricher(concurrent=session_factory is not None)

    def _relations(self) -> List[RelationSpec]:
        return [
            RelationSpec("developer", "developer_id", summary_loader(self.developer_repo, ("id", "name", "logo", "slug"))),
            RelationSpec("agent", "agent_id", summary_loader(self.user_repo, ("id", "name", "email", "phone"))),
        ]

    async def present(self, properties: List[Property]) -> List[Dict[str, Any]]:
        """
        Enrich properties with their developer and agent and format them for the API.

        Args:
            properties: Property rows

        Returns:
            Serialized property dicts
        """
        rows = await self.enricher.enrich([p.to_dict() for p in properties], self._relations())
        return [PropertyResponse.model_validate(row).to_response() for row in rows]

    async def search_properties(self, filters: PropertySearchFilters) -> Tuple[List[Dict[str, Any]], int]:
        """
        Search properties and return one enriched page with the total count.

        Args:
            filters: Validated listing filters

        Returns:
            Tuple of (serialized properties, total count)
        """
        properties, total = await self.property_repo.search(filters)
        return await self.present(properties), total

    async def get_featured_properties(self, limit: int = 3) -> List[Dict[str, Any]]:
        properties = await self.property_repo.get_featured(limit)
        return await self.present(properties)

    async def get_property(self, property_id: int) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise NotFoundError("Property", property_id)
        return property_obj

    async def get_property_detail(self, property_id: int) -> Dict[str, Any]:
        """
        Property page: the property, similar listings and its inquiry count.

        Args:
            property_id: ID of the property

        Returns:
            Dictionary with `data` and `meta` entries

        Raises:
            NotFoundError: If property doesn't exist
        """
        property_obj = await self.get_property(property_id)

        similar, inquiry_count = await self.property_repo.gather_reads(
            self.property_repo.get_similar(property_obj),
            self.property_repo.count_inquiries(property_id),
        )

        # One enrichment pass covers the property and its similar listings
        rows = await self.enricher.enrich(
            [property_obj.to_dict()] + [p.to_dict() for p in similar],
            self._relations()
        )
        detail = PropertyDetailResponse.model_validate({
            **rows[0],
            "inquiry_count": inquiry_count,
            "similar_properties": rows[1:],
        }).to_response()

        return {
            "data": detail,
            "meta": {
                "inquiryCount": inquiry_count,
                "lastUpdated": detail["updated_at"],
            },
        }

    async def create_property(
        self,
        property_data: PropertyCreate,
        images: List[UploadFile],
        header_image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Create a property, storing its uploaded images first.

        If the insert fails, every file uploaded for this request is deleted
        before the error propagates.

        Args:
            property_data: Validated property fields
            images: Gallery image uploads, in display order
            header_image: Optional header image upload

        Returns:
            The created property, enriched

        Raises:
            BadRequestError: If a referenced developer or agent doesn't exist
            FileUploadError: If an upload is rejected
        """
        await self._validate_references(property_data.developer_id, property_data.agent_id)

        uploaded = await self._upload(images, header_image)
        image_urls = uploaded["images"]

        create_data = property_data.model_dump(exclude={"main_image"})
        create_data["images"] = image_urls
        create_data["header_image"] = uploaded["header"]
        create_data["main_image"] = (
            (image_urls[0] if image_urls else None)
            or property_data.main_image
            or settings.default_property_image
        )

        try:
            property_obj = await self.property_repo.create(create_data)
        except Exception:
            await self._discard(uploaded["all"])
            raise

        logger.info(
            f"Property created: {property_obj.title} (ID: {property_obj.id})",
            extra={"property_id": property_obj.id, "images": len(image_urls)}
        )
        return (await self.present([property_obj]))[0]

    async def update_property(
        self,
        property_id: int,
        property_data: PropertyUpdate,
        images: List[UploadFile],
        header_image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Partially update a property.

        `existing_images`, when given, replaces the stored gallery order; new
        uploads are appended after it. Files dropped from the gallery are removed
        from storage once the update is committed.

        Args:
            property_id: ID of the property
            property_data: Submitted fields only
            images: New gallery uploads
            header_image: Optional replacement header image

        Returns:
            The updated property, enriched

        Raises:
            NotFoundError: If property doesn't exist
            BadRequestError: If nothing was submitted
        """
        property_obj = await self.get_property(property_id)

        update_data = property_data.model_dump(exclude_unset=True, exclude={"existing_images"})
        if not update_data and property_data.existing_images is None and not images and not header_image:
            raise BadRequestError("No valid fields to update")

        await self._validate_references(update_data.get("developer_id"), update_data.get("agent_id"))

        previous_images = list(property_obj.images or [])
        previous_header = property_obj.header_image
        gallery = property_data.existing_images if property_data.existing_images is not None else previous_images

        uploaded = await self._upload(images, header_image)
        if property_data.existing_images is not None or uploaded["images"]:
            update_data["images"] = list(gallery) + uploaded["images"]
        if uploaded["header"]:
            update_data["header_image"] = uploaded["header"]
        if "images" in update_data and not update_data.get("main_image"):
            update_data["main_image"] = self._main_image_for(
                property_obj.main_image, previous_images, update_data["images"]
            )

        try:
            property_obj = await self.property_repo.update(property_id, update_data)
        except Exception:
            await self._discard(uploaded["all"])
            raise

        removed = [
            url for url in previous_images
            if url not in property_obj.images and url != property_obj.main_image
        ]
        if previous_header and previous_header != property_obj.header_image:
            removed.append(previous_header)
        await self._discard(removed)

        logger.info(f"Property updated: {property_id}", extra={"fields": sorted(update_data)})
        return (await self.present([property_obj]))[0]

    async def delete_property(self, property_id: int) -> None:
        """
        Delete a property and its stored images.

        Raises:
            NotFoundError: If property doesn't exist
            RelatedRecordsError: If inquiries reference the property
        """
        property_obj = await self.get_property(property_id)

        if await self.property_repo.count_inquiries(property_id):
            raise RelatedRecordsError("Property", "inquiries")

        files = list(property_obj.images or []) + [property_obj.header_image, property_obj.main_image]
        await self.property_repo.delete(property_id)
        await self._discard(sorted({url for url in files if url}))

        logger.info(f"Property deleted: {property_id}")

    async def _upload(self, images: List[UploadFile], header_image: Optional[UploadFile]) -> Dict[str, Any]:
        uploaded: Dict[str, Any] = {"images": [], "header": None, "all": []}
        if not images and not header_image:
            return uploaded

        uploaded["images"] = await self.storage.upload_many(IMAGE_FOLDER, images)
        uploaded["all"] = list(uploaded["images"])
        if header_image:
            try:
                uploaded["header"] = await self.storage.upload(HEADER_FOLDER, header_image)
            except Exception:
                await self.storage.delete_many(uploaded["all"])
                raise
            uploaded["all"].append(uploaded["header"])
        return uploaded

    async def _discard(self, urls: List[str]) -> None:
        if urls and self.storage:
            await self.storage.delete_many(urls)

    @staticmethod
    def _main_image_for(current: Optional[str], previous_gallery: List[str], gallery: List[str]) -> str:
        """
        Main image after a gallery change.

        A main image set outside the gallery, or still in it, is kept. Otherwise the
        first gallery image is promoted, or the placeholder when the gallery is empty.
        """
        placeholder = settings.default_property_image
        if current and current != placeholder and (current in gallery or current not in previous_gallery):
            return current
        return gallery[0] if gallery else settings.default_property_image

    async def _validate_references(self, developer_id: Optional[int], agent_id: Optional[int]) -> None:
        if developer_id is not None and not await self.developer_repo.exists(developer_id):
            raise BadRequestError(f"Developer {developer_id} does not exist")
        if agent_id is not None and not await self.user_repo.exists(agent_id):
            raise BadRequestError(f"Agent {agent_id} does not exist")
