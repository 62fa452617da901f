"""
Document request endpoints.
Submission is public and rate limited; the back-office workflow is admin only.
"""

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from propertyhub.models.user import User
from propertyhub.schemas.common import AdminListParams, AdminPagination
from propertyhub.schemas.document_request import DocumentRequestCreate, DocumentRequestUpdate
from propertyhub.services.inquiry import DocumentRequestService
from propertyhub.utils.dependencies import admin_list_params, get_current_admin_user, get_document_request_service
from propertyhub.utils.rate_limit import RateLimit


router = APIRouter(prefix="/document-requests", tags=["Document Requests"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Request a property document",
    dependencies=[Depends(RateLimit("document-requests", 5))]
)
async def create_document_request(
    request_data: DocumentRequestCreate,
    service: DocumentRequestService = Depends(get_document_request_service)
) -> Dict[str, Any]:
    """
    Raises:
        RequestValidationError: If name, email, phone or documentType is missing
    """
    document_request = await service.create(request_data)
    return {
        "success": True,
        "data": document_request,
        "message": "Document request submitted successfully",
    }


@router.get("", summary="List document requests")
async def list_document_requests(
    params: AdminListParams = Depends(admin_list_params),
    current_user: User = Depends(get_current_admin_user),
    service: DocumentRequestService = Depends(get_document_request_service)
) -> Dict[str, Any]:
    data, total = await service.list_records(params)
    return {
        "success": True,
        "data": data,
        "pagination": AdminPagination.build(params.page, params.limit, total),
    }


@router.get("/{request_id}", summary="Document request detail")
async def get_document_request(
    request_id: int,
    current_user: User = Depends(get_current_admin_user),
    service: DocumentRequestService = Depends(get_document_request_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await service.get(request_id)}


@router.put("/{request_id}", summary="Update document request workflow fields")
async def update_document_request(
    request_id: int,
    request_data: DocumentRequestUpdate,
    current_user: User = Depends(get_current_admin_user),
    service: DocumentRequestService = Depends(get_document_request_service)
) -> Dict[str, Any]:
    """Only `status`, `notes`, `assignedTo` and `completedAt` can change."""
    document_request = await service.update(request_id, request_data)
    return {"success": True, "data": document_request, "message": "Document request updated successfully"}


@router.delete("/{request_id}", summary="Delete document request")
async def delete_document_request(
    request_id: int,
    current_user: User = Depends(get_current_admin_user),
    service: DocumentRequestService = Depends(get_document_request_service)
) -> Dict[str, Any]:
    await service.delete(request_id)
    return {"success": True, "message": "Document request deleted successfully"}
