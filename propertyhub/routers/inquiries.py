"""
Property inquiry and off-plan inquiry endpoints.
Submission is public and rate limited; everything else is admin only.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional, Dict, Any

from propertyhub.models.user import User
from propertyhub.schemas.common import AdminListParams, AdminPagination
from propertyhub.schemas.inquiry import InquiryCreate, InquiryUpdate, OffplanInquiryCreate
from propertyhub.services.inquiry import InquiryService
from propertyhub.utils.dependencies import (
    admin_list_params,
    get_current_admin_user,
    get_inquiry_service,
    get_offplan_inquiry_service,
    get_optional_current_user
)
from propertyhub.utils.rate_limit import RateLimit


router = APIRouter(prefix="/inquiries", tags=["Inquiries"])
offplan_router = APIRouter(prefix="/offplan-inquiries", tags=["Off-plan Inquiries"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a property inquiry",
    dependencies=[Depends(RateLimit("inquiries", 5))]
)
async def create_inquiry(
    inquiry_data: InquiryCreate,
    current_user: Optional[User] = Depends(get_optional_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Dict[str, Any]:
    """
    Raises:
        RequestValidationError: If name, email, phone or message is missing
        BadRequestError: If the property doesn't exist
    """
    inquiry = await inquiry_service.create(inquiry_data, user_id=current_user.id if current_user else None)
    return {
        "success": True,
        "data": inquiry,
        "message": "Inquiry submitted successfully. We will contact you soon.",
    }


@router.get("", summary="List inquiries")
async def list_inquiries(
    params: AdminListParams = Depends(admin_list_params),
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Dict[str, Any]:
    data, total = await inquiry_service.list_records(params)
    return {
        "success": True,
        "data": data,
        "pagination": AdminPagination.build(params.page, params.limit, total),
    }


@router.get("/{inquiry_id}", summary="Inquiry detail")
async def get_inquiry(
    inquiry_id: int,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await inquiry_service.get(inquiry_id)}


@router.put("/{inquiry_id}", summary="Update inquiry workflow fields")
async def update_inquiry(
    inquiry_id: int,
    inquiry_data: InquiryUpdate,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Dict[str, Any]:
    """Only `status`, `notes` and `assignedTo` can change."""
    inquiry = await inquiry_service.update(inquiry_id, inquiry_data)
    return {"success": True, "data": inquiry, "message": "Inquiry updated successfully"}


@router.delete("/{inquiry_id}", summary="Delete inquiry")
async def delete_inquiry(
    inquiry_id: int,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Dict[str, Any]:
    await inquiry_service.delete(inquiry_id)
    return {"success": True, "message": "Inquiry deleted successfully"}


@offplan_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit an off-plan inquiry",
    dependencies=[Depends(RateLimit("offplan-inquiries", 5))]
)
async def create_offplan_inquiry(
    inquiry_data: OffplanInquiryCreate,
    inquiry_service: InquiryService = Depends(get_offplan_inquiry_service)
) -> Dict[str, Any]:
    inquiry = await inquiry_service.create(inquiry_data)
    return {
        "success": True,
        "data": inquiry,
        "message": "Off-plan inquiry submitted successfully. We will contact you soon.",
    }


@offplan_router.get("", summary="List off-plan inquiries")
async def list_offplan_inquiries(
    params: AdminListParams = Depends(admin_list_params),
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_offplan_inquiry_service)
) -> Dict[str, Any]:
    data, total = await inquiry_service.list_records(params)
    return {
        "success": True,
        "data": data,
        "pagination": AdminPagination.build(params.page, params.limit, total),
    }


@offplan_router.get("/{inquiry_id}", summary="Off-plan inquiry detail")
async def get_offplan_inquiry(
    inquiry_id: int,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_offplan_inquiry_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await inquiry_service.get(inquiry_id)}


@offplan_router.put("/{inquiry_id}", summary="Update off-plan inquiry workflow fields")
async def update_offplan_inquiry(
    inquiry_id: int,
    inquiry_data: InquiryUpdate,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_offplan_inquiry_service)
) -> Dict[str, Any]:
    inquiry = await inquiry_service.update(inquiry_id, inquiry_data)
    return {"success": True, "data": inquiry, "message": "Off-plan inquiry updated successfully"}


@offplan_router.delete("/{inquiry_id}", summary="Delete off-plan inquiry")
async def delete_offplan_inquiry(
    inquiry_id: int,
    current_user: User = Depends(get_current_admin_user),
    inquiry_service: InquiryService = Depends(get_offplan_inquiry_service)
) -> Dict[str, Any]:
    await inquiry_service.delete(inquiry_id)
    return {"success": True, "message": "Off-plan inquiry deleted successfully"}
