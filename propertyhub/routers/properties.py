"""
Property listing endpoints: search, featured, detail pages and property management.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional, Dict, Any

from propertyhub.models.user import User
from propertyhub.schemas.common import listing_pagination
from propertyhub.schemas.property import PropertyCreate, PropertySearchFilters, PropertyUpdate
from propertyhub.services.property import PropertyService
from propertyhub.utils import cache as cache_policies
from propertyhub.utils.cache import CacheBackend, build_cache_key, cached_response, get_cache_backend, invalidate
from propertyhub.utils.dependencies import (
    FormPayload,
    form_payload,
    get_optional_current_user,
    get_property_service,
    property_filters
)
from propertyhub.utils.rate_limit import RateLimit
from propertyhub.utils.validators import parse_int, require_fields


router = APIRouter(prefix="/properties", tags=["Properties"])

WRITE_INVALIDATES = (
    cache_policies.PROPERTIES,
    cache_policies.FEATURED_PROPERTIES,
    cache_policies.PROPERTY_DETAIL,
    cache_policies.DEVELOPERS,
)


@router.get(
    "",
    summary="List properties with search and filtering",
    dependencies=[Depends(RateLimit("properties", 100))]
)
async def list_properties(
    filters: PropertySearchFilters = Depends(property_filters),
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Paginated property search.

    Every recognised query parameter adds one filter; unknown or unparseable
    values are ignored. The response echoes the effective filters.
    """

    async def compute() -> Dict[str, Any]:
        data, total = await property_service.search_properties(filters)
        return {
            "success": True,
            "data": data,
            "pagination": listing_pagination(filters.page, filters.limit, total),
            "filters": filters.echo(),
        }

    return await cached_response(
        cache, cache_policies.PROPERTIES, build_cache_key(filters.cache_params()), compute
    )


@router.get(
    "/featured",
    summary="Featured properties",
    dependencies=[Depends(RateLimit("featured-properties", 200))]
)
async def get_featured_properties(
    limit: Optional[str] = None,
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    count = parse_int(limit)
    count = min(count, 100) if count and count > 0 else 3

    async def compute() -> Dict[str, Any]:
        data = await property_service.get_featured_properties(count)
        return {
            "success": True,
            "data": data,
            "count": len(data),
            "message": "Featured properties retrieved successfully",
        }

    return await cached_response(
        cache, cache_policies.FEATURED_PROPERTIES, build_cache_key({"limit": count}), compute
    )


@router.get(
    "/{property_id}",
    summary="Property detail",
    dependencies=[Depends(RateLimit("property-detail", 200))]
)
async def get_property(
    property_id: int,
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    A property with its similar listings and inquiry count.
    """

    async def compute() -> Dict[str, Any]:
        return {"success": True, **await property_service.get_property_detail(property_id)}

    return await cached_response(
        cache, cache_policies.PROPERTY_DETAIL, build_cache_key({"id": property_id}), compute
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Multipart form with optional `images` and `headerImage` files."
)
async def create_property(
    payload: FormPayload = Depends(form_payload),
    current_user: Optional[User] = Depends(get_optional_current_user),
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Create a property listing.

    Raises:
        MissingFieldsError: If a required field is absent or blank
        BadRequestError: If a referenced developer or agent doesn't exist
        FileUploadError: If an image is rejected
    """
    require_fields(payload.fields, PropertyCreate.required_fields(payload.fields))
    property_data = PropertyCreate.model_validate(payload.fields)

    # Agents listing their own property are attributed automatically
    if property_data.agent_id is None and current_user and current_user.is_agent:
        property_data.agent_id = current_user.id

    created = await property_service.create_property(
        property_data,
        payload.file_list("images"),
        payload.file("headerImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {
        "success": True,
        "data": created,
        "message": "Property created successfully",
    }


@router.put("/{property_id}", summary="Update property")
async def update_property(
    property_id: int,
    payload: FormPayload = Depends(form_payload),
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Partially update a property. Only submitted fields change.
    """
    property_data = PropertyUpdate.model_validate(payload.fields)

    updated = await property_service.update_property(
        property_id,
        property_data,
        payload.file_list("images"),
        payload.file("headerImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {
        "success": True,
        "data": updated,
        "message": "Property updated successfully",
    }


@router.delete("/{property_id}", summary="Delete property")
async def delete_property(
    property_id: int,
    property_service: PropertyService = Depends(get_property_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    await property_service.delete_property(property_id)
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "message": "Property deleted successfully"}
