"""
Lead capture: property inquiries, off-plan inquiries, document requests and
contact-form messages, plus their back-office workflow.
"""

import enum
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple, Type
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from pydantic import BaseModel
from propertyhub.repositories.base import BaseRepository
from propertyhub.repositories.content import (
    DocumentRequestRepository,
    InquiryRepository,
    MessageRepository,
    OffplanInquiryRepository,
)
from propertyhub.repositories.property import PropertyRepository
from propertyhub.repositories.user import UserRepository
from propertyhub.schemas.common import AdminListParams, CamelModel
from propertyhub.schemas.inquiry import (
    InquiryCreate,
    InquiryResponse,
    OffplanInquiryCreate,
    OffplanInquiryResponse,
)
from propertyhub.schemas.document_request import DocumentRequestCreate, DocumentRequestResponse
from propertyhub.schemas.message import ContactCreate, MessageResponse
from propertyhub.models.document_request import DocumentRequestStatus
from propertyhub.models.inquiry import InquiryStatus
from propertyhub.models.message import MessageStatus
from propertyhub.utils.exceptions import BadRequestError, NotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


class LeadService:
    """
    Back-office list, read, update and delete shared by every lead kind.
    """

    resource = "Record"
    response_model: Type[CamelModel] = CamelModel
    status_enum: Type[enum.Enum] = InquiryStatus

    def __init__(self, repository: BaseRepository):
        self.repository = repository

    def present(self, row) -> Dict[str, Any]:
        return self.response_model.model_validate(row.to_dict()).to_response()

    async def list_records(self, params: AdminListParams) -> Tuple[List[Dict[str, Any]], int]:
        rows, total = await self.repository.admin_page(
            params.page,
            params.limit,
            search=params.search,
            search_fields=self.repository.SEARCH_FIELDS,
            filters={"status": self._status_filter(params.status)},
        )
        return [self.present(row) for row in rows], total

    async def get(self, record_id: int) -> Dict[str, Any]:
        return self.present(await self._get(record_id))

    async def update(self, record_id: int, data: BaseModel) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the record doesn't exist
            BadRequestError: If nothing was submitted
        """
        await self._get(record_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise BadRequestError("No valid fields to update")
        await self._prepare_update(update_data)

        row = await self.repository.update(record_id, update_data)
        logger.info(f"{self.resource} updated: {record_id}", extra={"fields": sorted(update_data)})
        return self.present(row)

    async def delete(self, record_id: int) -> None:
        await self._get(record_id)
        await self.repository.delete(record_id)
        logger.info(f"{self.resource} deleted: {record_id}")

    async def _get(self, record_id: int):
        row = await self.repository.get_by_id(record_id)
        if not row:
            raise NotFoundError(self.resource, record_id)
        return row

    async def _prepare_update(self, update_data: Dict[str, Any]) -> None:
        """Validate the submitted fields, adding any derived ones in place."""

    async def _check_assignee(self, update_data: Dict[str, Any]) -> None:
        assignee = update_data.get("assigned_to")
        if assignee is not None and not await self.user_repo.exists(assignee):
            raise BadRequestError(f"User {assignee} does not exist")

    def _status_filter(self, value: Optional[str]):
        if value is None:
            return None
        try:
            return self.status_enum(value.lower())
        except ValueError:
            allowed = ", ".join(member.value for member in self.status_enum)
            raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}")


class InquiryService(LeadService):
    """
    Property inquiries. `offplan=True` switches to the off-plan inquiry table.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        offplan: bool = False
    ):
        repository_cls = OffplanInquiryRepository if offplan else InquiryRepository
        super().__init__(repository_cls(db_session, session_factory))
        self.offplan = offplan
        self.resource = "Off-plan inquiry" if offplan else "Inquiry"
        self.response_model = OffplanInquiryResponse if offplan else InquiryResponse
        self.property_repo = PropertyRepository(db_session, session_factory)
        self.user_repo = UserRepository(db_session, session_factory)

    async def create(self, inquiry_data: InquiryCreate, user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Record a new inquiry from the public site.

        Args:
            inquiry_data: Validated form fields
            user_id: Signed-in visitor, if any

        Raises:
            BadRequestError: If the referenced property doesn't exist
        """
        if inquiry_data.property_id is not None and not await self.property_repo.exists(inquiry_data.property_id):
            raise BadRequestError(f"Property {inquiry_data.property_id} does not exist")

        create_data = inquiry_data.model_dump(exclude_none=True)
        create_data["status"] = InquiryStatus.NEW
        create_data.setdefault("source", "website")
        if isinstance(inquiry_data, OffplanInquiryCreate):
            create_data.setdefault("preferred_language", "english")
        elif user_id is not None:
            create_data["user_id"] = user_id

        inquiry = await self.repository.create(create_data)
        logger.info(
            f"{self.resource} received: {inquiry.id}",
            extra={"property_id": inquiry.property_id, "source": inquiry.source}
        )
        return self.present(inquiry)

    async def _prepare_update(self, update_data: Dict[str, Any]) -> None:
        await self._check_assignee(update_data)


class MessageService(LeadService):
    """Contact-form messages and the admin inbox."""

    resource = "Message"
    response_model = MessageResponse
    status_enum = MessageStatus

    def __init__(self, db_session: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(MessageRepository(db_session, session_factory))

    async def create(self, contact_data: ContactCreate) -> Dict[str, Any]:
        message = await self.repository.create({
            **contact_data.model_dump(exclude_none=True),
            "status": MessageStatus.NEW,
            "source": "contact_form",
        })
        logger.info(f"Contact message received: {message.id}")
        return self.present(message)


class DocumentRequestService(LeadService):
    """
    Document requests. Completing a request stamps `completed_at` unless the
    admin supplies one.
    """

    resource = "Document request"
    response_model = DocumentRequestResponse
    status_enum = DocumentRequestStatus

    def __init__(self, db_session: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        super().__init__(DocumentRequestRepository(db_session, session_factory))
        self.user_repo = UserRepository(db_session, session_factory)

    async def create(self, request_data: DocumentRequestCreate) -> Dict[str, Any]:
        create_data = request_data.model_dump(exclude_none=True)
        create_data["status"] = DocumentRequestStatus.PENDING
        create_data.setdefault("source", "website")

        document_request = await self.repository.create(create_data)
        logger.info(
            f"Document request received: {document_request.id}",
            extra={"document_type": document_request.document_type, "source": document_request.source}
        )
        return self.present(document_request)

    async def _prepare_update(self, update_data: Dict[str, Any]) -> None:
        await self._check_assignee(update_data)
        if update_data.get("status") == DocumentRequestStatus.COMPLETED and "completed_at" not in update_data:
            update_data["completed_at"] = datetime.now(timezone.utc)
