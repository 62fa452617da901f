"""
Blog endpoints: published listings, tag and category clouds, and post management.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional, Dict, Any

from propertyhub.models.user import User
from propertyhub.schemas.blog import BlogListParams, BlogPostWrite
from propertyhub.schemas.common import listing_pagination
from propertyhub.services.blog import BlogService
from propertyhub.utils import cache as cache_policies
from propertyhub.utils.cache import CacheBackend, build_cache_key, cached_response, get_cache_backend, invalidate
from propertyhub.utils.dependencies import (
    FormPayload,
    blog_list_params,
    form_payload,
    get_blog_service,
    get_optional_current_user
)
from propertyhub.utils.rate_limit import RateLimit
from propertyhub.utils.validators import parse_int, require_fields


router = APIRouter(prefix="/blog", tags=["Blog"])

WRITE_INVALIDATES = (cache_policies.BLOG, cache_policies.FEATURED_BLOG)


def _limit(value: Optional[str], default: int) -> int:
    limit = parse_int(value)
    return min(limit, 100) if limit and limit > 0 else default


@router.get("", summary="Published blog posts", dependencies=[Depends(RateLimit("blog", 200))])
async def list_posts(
    params: BlogListParams = Depends(blog_list_params),
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Paginated list of published posts, optionally filtered by `featured` and `search`.
    """

    async def compute() -> Dict[str, Any]:
        data, total = await blog_service.list_posts(params)
        return {
            "success": True,
            "data": data,
            "pagination": listing_pagination(params.page, params.limit, total),
            "filters": params.model_dump(by_alias=True, include={"featured", "search", "sort_by", "sort_order"}),
        }

    key = build_cache_key({"list": params.model_dump(by_alias=True)})
    return await cached_response(cache, cache_policies.BLOG, key, compute)


@router.get("/recent", summary="Most recent posts")
async def get_recent_posts(
    limit: Optional[str] = None,
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    count = _limit(limit, 5)

    async def compute() -> Dict[str, Any]:
        return {"success": True, "data": await blog_service.get_recent_posts(count)}

    return await cached_response(cache, cache_policies.BLOG, build_cache_key({"recent": count}), compute)


@router.get("/tags", summary="Tag counts")
async def get_tags(
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """Tags of published posts, most used first."""

    async def compute() -> Dict[str, Any]:
        return {"success": True, "data": await blog_service.get_tags()}

    return await cached_response(cache, cache_policies.BLOG, build_cache_key({"tags": True}), compute)


@router.get("/categories", summary="Category counts")
async def get_categories(
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:

    async def compute() -> Dict[str, Any]:
        return {"success": True, "data": await blog_service.get_categories()}

    return await cached_response(cache, cache_policies.BLOG, build_cache_key({"categories": True}), compute)


@router.get("/featured", summary="Featured posts", dependencies=[Depends(RateLimit("featured-blog", 200))])
async def get_featured_posts(
    limit: Optional[str] = None,
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    count = _limit(limit, 3)

    async def compute() -> Dict[str, Any]:
        data = await blog_service.get_featured_posts(count)
        return {"success": True, "data": data, "count": len(data)}

    return await cached_response(cache, cache_policies.FEATURED_BLOG, build_cache_key({"limit": count}), compute)


@router.get("/{post_id}", summary="Blog post detail")
async def get_post(
    post_id: int,
    blog_service: BlogService = Depends(get_blog_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await blog_service.get_post(post_id)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create blog post")
async def create_post(
    payload: FormPayload = Depends(form_payload),
    current_user: Optional[User] = Depends(get_optional_current_user),
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Create a post. `featuredImage` may be an uploaded file or an image URL.

    Raises:
        MissingFieldsError: If title, content or excerpt is missing
        ConflictError: If a post with the same title exists
    """
    require_fields(payload.fields, BlogPostWrite.REQUIRED_FIELDS)
    post = await blog_service.create_post(
        BlogPostWrite.model_validate(payload.fields),
        author_id=current_user.id if current_user else None,
        image=payload.file("featuredImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "data": post, "message": "Blog post created successfully"}


@router.put("/{post_id}", summary="Update blog post")
async def update_post(
    post_id: int,
    payload: FormPayload = Depends(form_payload),
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    require_fields(payload.fields, BlogPostWrite.REQUIRED_FIELDS)
    post = await blog_service.update_post(
        post_id,
        BlogPostWrite.model_validate(payload.fields),
        image=payload.file("featuredImage")
    )
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "data": post, "message": "Blog post updated successfully"}


@router.delete("/{post_id}", summary="Delete blog post")
async def delete_post(
    post_id: int,
    blog_service: BlogService = Depends(get_blog_service),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    await blog_service.delete_post(post_id)
    await invalidate(cache, *WRITE_INVALIDATES)

    return {"success": True, "message": "Blog post deleted successfully"}
