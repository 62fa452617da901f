"""
Contact form submission and the admin message inbox.
"""

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from propertyhub.models.user import User
from propertyhub.schemas.common import AdminListParams, AdminPagination
from propertyhub.schemas.message import ContactCreate, MessageUpdate
from propertyhub.services.inquiry import MessageService
from propertyhub.utils.dependencies import admin_list_params, get_current_admin_user, get_message_service
from propertyhub.utils.rate_limit import RateLimit


contact_router = APIRouter(prefix="/contact", tags=["Contact"])
router = APIRouter(prefix="/messages", tags=["Messages"])


@contact_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit the contact form",
    dependencies=[Depends(RateLimit("contact", 10))]
)
async def submit_contact_form(
    contact_data: ContactCreate,
    message_service: MessageService = Depends(get_message_service)
) -> Dict[str, Any]:
    message = await message_service.create(contact_data)
    return {
        "success": True,
        "message": "Thank you for your message! We will get back to you soon.",
        "data": {"id": message["id"]},
    }


@router.get("", summary="List messages")
async def list_messages(
    params: AdminListParams = Depends(admin_list_params),
    current_user: User = Depends(get_current_admin_user),
    message_service: MessageService = Depends(get_message_service)
) -> Dict[str, Any]:
    data, total = await message_service.list_records(params)
    return {
        "success": True,
        "data": data,
        "pagination": AdminPagination.build(params.page, params.limit, total),
    }


@router.get("/{message_id}", summary="Message detail")
async def get_message(
    message_id: int,
    current_user: User = Depends(get_current_admin_user),
    message_service: MessageService = Depends(get_message_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await message_service.get(message_id)}


@router.put("/{message_id}", summary="Update message status or notes")
async def update_message(
    message_id: int,
    message_data: MessageUpdate,
    current_user: User = Depends(get_current_admin_user),
    message_service: MessageService = Depends(get_message_service)
) -> Dict[str, Any]:
    message = await message_service.update(message_id, message_data)
    return {"success": True, "data": message, "message": "Message updated successfully"}


@router.delete("/{message_id}", summary="Delete message")
async def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_admin_user),
    message_service: MessageService = Depends(get_message_service)
) -> Dict[str, Any]:
    await message_service.delete(message_id)
    return {"success": True, "message": "Message deleted successfully"}
