"""
Site content managed from the back office: testimonials and the team page.
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from fastapi import UploadFile
from propertyhub.repositories.content import TeamRepository, TestimonialRepository
from propertyhub.models.testimonial import TestimonialStatus
from propertyhub.schemas.team import TeamMemberResponse, TeamMemberWrite
from propertyhub.schemas.testimonial import TestimonialResponse, TestimonialWrite
from propertyhub.services.storage import ObjectStorage
from propertyhub.utils.exceptions import BadRequestError, MissingFieldsError, NotFoundError
from propertyhub.utils.validators import missing_required_fields
import logging

logger = logging.getLogger(__name__)


class TestimonialService:
    """
    Testimonials. New submissions start as pending until approved.
    """

    REQUIRED_FIELDS = ("name", "content", "rating")

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        storage: Optional[ObjectStorage] = None
    ):
        self.storage = storage
        self.testimonial_repo = TestimonialRepository(db_session, session_factory)

    @staticmethod
    def present(testimonial) -> Dict[str, Any]:
        return TestimonialResponse.model_validate(testimonial.to_dict()).to_response()

    async def list_testimonials(self) -> List[Dict[str, Any]]:
        return [self.present(t) for t in await self.testimonial_repo.list_all()]

    async def get_testimonial(self, testimonial_id: int) -> Dict[str, Any]:
        return self.present(await self._get(testimonial_id))

    async def create_testimonial(
        self,
        testimonial_data: TestimonialWrite,
        image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Raises:
            MissingFieldsError: If name, content or rating is missing
        """
        create_data = testimonial_data.model_dump(exclude_none=True)
        missing = missing_required_fields(create_data, self.REQUIRED_FIELDS)
        if missing:
            raise MissingFieldsError(missing)

        create_data["status"] = TestimonialStatus.PENDING
        create_data.setdefault("featured", False)
        create_data.setdefault("is_active", True)
        if image:
            create_data["image"] = await self.storage.upload("testimonials", image)

        testimonial = await self.testimonial_repo.create(create_data)
        logger.info(f"Testimonial created: {testimonial.id}", extra={"rating": testimonial.rating})
        return self.present(testimonial)

    async def update_testimonial(
        self,
        testimonial_id: int,
        testimonial_data: TestimonialWrite,
        image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        await self._get(testimonial_id)

        update_data = testimonial_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data and not image:
            raise BadRequestError("No valid fields to update")
        if image:
            update_data["image"] = await self.storage.upload("testimonials", image)

        testimonial = await self.testimonial_repo.update(testimonial_id, update_data)
        logger.info(f"Testimonial updated: {testimonial_id}")
        return self.present(testimonial)

    async def delete_testimonial(self, testimonial_id: int) -> None:
        await self._get(testimonial_id)
        await self.testimonial_repo.delete(testimonial_id)
        logger.info(f"Testimonial deleted: {testimonial_id}")

    async def _get(self, testimonial_id: int):
        testimonial = await self.testimonial_repo.get_by_id(testimonial_id)
        if not testimonial:
            raise NotFoundError("Testimonial", testimonial_id)
        return testimonial


class TeamService:
    REQUIRED_FIELDS = ("name", "position")

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        storage: Optional[ObjectStorage] = None
    ):
        self.storage = storage
        self.team_repo = TeamRepository(db_session, session_factory)

    @staticmethod
    def present(member) -> Dict[str, Any]:
        return TeamMemberResponse.model_validate(member.to_dict()).to_response()

    async def list_members(self) -> List[Dict[str, Any]]:
        """Active members ordered by name."""
        return [self.present(m) for m in await self.team_repo.list_active()]

    async def get_member(self, member_id: int) -> Dict[str, Any]:
        return self.present(await self._get(member_id))

    async def create_member(self, member_data: TeamMemberWrite, image: Optional[UploadFile] = None) -> Dict[str, Any]:
        create_data = member_data.model_dump(exclude_none=True)
        missing = missing_required_fields(create_data, self.REQUIRED_FIELDS)
        if missing:
            raise MissingFieldsError(missing)

        create_data.setdefault("social_links", {})
        create_data.setdefault("is_active", True)
        create_data.setdefault("is_leadership", False)
        create_data.setdefault("sort_order", 0)
        if image:
            create_data["image"] = await self.storage.upload("team", image)

        member = await self.team_repo.create(create_data)
        logger.info(f"Team member created: {member.name} (ID: {member.id})")
        return self.present(member)

    async def update_member(
        self,
        member_id: int,
        member_data: TeamMemberWrite,
        image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        member = await self._get(member_id)
        previous_image = member.image

        update_data = member_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data and not image:
            raise BadRequestError("No valid fields to update")
        if image:
            update_data["image"] = await self.storage.upload("team", image)

        member = await self.team_repo.update(member_id, update_data)
        if image and previous_image:
            await self.storage.delete_many([previous_image])

        logger.info(f"Team member updated: {member_id}")
        return self.present(member)

    async def delete_member(self, member_id: int) -> None:
        await self._get(member_id)
        await self.team_repo.delete(member_id)
        logger.info(f"Team member deleted: {member_id}")

    async def _get(self, member_id: int):
        member = await self.team_repo.get_by_id(member_id)
        if not member:
            raise NotFoundError("Team member", member_id)
        return member
