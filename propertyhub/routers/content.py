"""
Team page and testimonial endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from propertyhub.schemas.team import TeamMemberWrite
from propertyhub.schemas.testimonial import TestimonialWrite
from propertyhub.services.content import TeamService, TestimonialService
from propertyhub.utils import cache as cache_policies
from propertyhub.utils.cache import CacheBackend, build_cache_key, cached_response, get_cache_backend, invalidate
from propertyhub.utils.dependencies import FormPayload, form_payload, get_team_service, get_testimonial_service
from propertyhub.utils.rate_limit import RateLimit
from propertyhub.utils.validators import require_fields


team_router = APIRouter(prefix="/team", tags=["Team"])
testimonials_router = APIRouter(prefix="/testimonials", tags=["Testimonials"])


@team_router.get("", summary="Active team members", dependencies=[Depends(RateLimit("team", 100))])
async def list_team(
    team_service: TeamService = Depends(get_team_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:

    async def compute() -> Dict[str, Any]:
        data = await team_service.list_members()
        return {"success": True, "data": data, "count": len(data)}

    return await cached_response(cache, cache_policies.TEAM, build_cache_key({"list": "active"}), compute)


@team_router.get("/{member_id}", summary="Team member detail")
async def get_team_member(
    member_id: int,
    team_service: TeamService = Depends(get_team_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await team_service.get_member(member_id)}


@team_router.post("", status_code=status.HTTP_201_CREATED, summary="Add team member")
async def create_team_member(
    payload: FormPayload = Depends(form_payload),
    team_service: TeamService = Depends(get_team_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Raises:
        MissingFieldsError: If name or position is missing
    """
    require_fields(payload.fields, TeamService.REQUIRED_FIELDS)
    member = await team_service.create_member(
        TeamMemberWrite.model_validate(payload.fields),
        image=payload.file("image")
    )
    await invalidate(cache, cache_policies.TEAM)

    return {"success": True, "data": member, "message": "Team member created successfully"}


@team_router.put("/{member_id}", summary="Update team member")
async def update_team_member(
    member_id: int,
    payload: FormPayload = Depends(form_payload),
    team_service: TeamService = Depends(get_team_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    member = await team_service.update_member(
        member_id,
        TeamMemberWrite.model_validate(payload.fields),
        image=payload.file("image")
    )
    await invalidate(cache, cache_policies.TEAM)

    return {"success": True, "data": member, "message": "Team member updated successfully"}


@team_router.delete("/{member_id}", summary="Remove team member")
async def delete_team_member(
    member_id: int,
    team_service: TeamService = Depends(get_team_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    await team_service.delete_member(member_id)
    await invalidate(cache, cache_policies.TEAM)

    return {"success": True, "message": "Team member deleted successfully"}


@testimonials_router.get("", summary="Testimonials", dependencies=[Depends(RateLimit("testimonials", 100))])
async def list_testimonials(
    testimonial_service: TestimonialService = Depends(get_testimonial_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:

    async def compute() -> Dict[str, Any]:
        data = await testimonial_service.list_testimonials()
        return {"success": True, "data": data, "count": len(data)}

    return await cached_response(cache, cache_policies.TESTIMONIALS, build_cache_key({"list": "all"}), compute)


@testimonials_router.get("/{testimonial_id}", summary="Testimonial detail")
async def get_testimonial(
    testimonial_id: int,
    testimonial_service: TestimonialService = Depends(get_testimonial_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await testimonial_service.get_testimonial(testimonial_id)}


@testimonials_router.post("", status_code=status.HTTP_201_CREATED, summary="Submit testimonial")
async def create_testimonial(
    payload: FormPayload = Depends(form_payload),
    testimonial_service: TestimonialService = Depends(get_testimonial_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    New testimonials start as pending.

    Raises:
        MissingFieldsError: If name, content (or quote) or rating is missing
    """
    testimonial = await testimonial_service.create_testimonial(
        TestimonialWrite.model_validate(payload.fields),
        image=payload.file("image")
    )
    await invalidate(cache, cache_policies.TESTIMONIALS)

    return {"success": True, "data": testimonial, "message": "Testimonial created successfully"}


@testimonials_router.put("/{testimonial_id}", summary="Update testimonial")
async def update_testimonial(
    testimonial_id: int,
    payload: FormPayload = Depends(form_payload),
    testimonial_service: TestimonialService = Depends(get_testimonial_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    testimonial = await testimonial_service.update_testimonial(
        testimonial_id,
        TestimonialWrite.model_validate(payload.fields),
        image=payload.file("image")
    )
    await invalidate(cache, cache_policies.TESTIMONIALS)

    return {"success": True, "data": testimonial, "message": "Testimonial updated successfully"}


@testimonials_router.delete("/{testimonial_id}", summary="Delete testimonial")
async def delete_testimonial(
    testimonial_id: int,
    testimonial_service: TestimonialService = Depends(get_testimonial_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    await testimonial_service.delete_testimonial(testimonial_id)
    await invalidate(cache, cache_policies.TESTIMONIALS)

    return {"success": True, "message": "Testimonial deleted successfully"}
