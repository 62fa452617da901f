"""
Developer endpoints: the public developer directory and developer management.
"""

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from propertyhub.schemas.developer import DeveloperWrite
from propertyhub.services.developer import DeveloperService
from propertyhub.utils import cache as cache_policies
from propertyhub.utils.cache import CacheBackend, build_cache_key, cached_response, get_cache_backend, invalidate
from propertyhub.utils.dependencies import FormPayload, form_payload, get_developer_service
from propertyhub.utils.rate_limit import RateLimit
from propertyhub.utils.validators import require_fields


router = APIRouter(prefix="/developers", tags=["Developers"])

# Property pages embed developer summaries
WRITE_INVALIDATES = (
    cache_policies.DEVELOPERS,
    cache_policies.PROPERTIES,
    cache_policies.FEATURED_PROPERTIES,
    cache_policies.PROPERTY_DETAIL,
)


@router.get("", summary="Active developers", dependencies=[Depends(RateLimit("developers", 100))])
async def list_developers(
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """Active developers ordered by name, each with its property count."""

    async def compute() -> Dict[str, Any]:
        data = await developer_service.list_active()
        return {"success": True, "data": data, "count": len(data)}

    return await cached_response(cache, cache_policies.DEVELOPERS, build_cache_key({"list": "active"}), compute)


@router.get("/slug/{slug}", summary="Developer by slug", dependencies=[Depends(RateLimit("developers", 100))])
async def get_developer_by_slug(
    slug: str,
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:

    async def compute() -> Dict[str, Any]:
        return {"success": True, "data": await developer_service.get_developer_by_slug(slug)}

    return await cached_response(cache, cache_policies.DEVELOPERS, build_cache_key({"slug": slug}), compute)


@router.get("/{developer_id}", summary="Developer detail", dependencies=[Depends(RateLimit("developers", 100))])
async def get_developer(
    developer_id: int,
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """A developer with its properties."""

    async def compute() -> Dict[str, Any]:
        return {"success": True, "data": await developer_service.get_developer_detail(developer_id)}

    return await cached_response(cache, cache_policies.DEVELOPERS, build_cache_key({"id": developer_id}), compute)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create developer")
async def create_developer(
    payload: FormPayload = Depends(form_payload),
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Create a developer from a form with optional `logo` and `backgroundImage` files.

    Raises:
        MissingFieldsError: If name is missing
        DuplicateResourceError: If the slug is taken
    """
    require_fields(payload.fields, ("name",))
    developer = await developer_service.create_developer(
        DeveloperWrite.model_validate(payload.fields),
        logo=payload.file("logo"),
        background_image=payload.file("backgroundImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "data": developer, "message": "Developer created successfully"}


@router.put("/{developer_id}", summary="Update developer")
async def update_developer(
    developer_id: int,
    payload: FormPayload = Depends(form_payload),
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    developer = await developer_service.update_developer(
        developer_id,
        DeveloperWrite.model_validate(payload.fields),
        logo=payload.file("logo"),
        background_image=payload.file("backgroundImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "data": developer, "message": "Developer updated successfully"}


@router.delete("/{developer_id}", summary="Delete developer")
async def delete_developer(
    developer_id: int,
    developer_service: DeveloperService = Depends(get_developer_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Raises:
        NotFoundError: If developer doesn't exist
        RelatedRecordsError: If properties still reference the developer
    """
    await developer_service.delete_developer(developer_id)
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "message": "Developer deleted successfully"}
