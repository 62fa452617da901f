"""
Response cache administration.
"""

from fastapi import APIRouter, Depends
from typing import Optional, Dict, Any
import logging

from propertyhub.models.user import User
from propertyhub.schemas.user import CacheClearRequest
from propertyhub.utils.cache import CACHE_POLICIES, CacheBackend, get_cache_backend
from propertyhub.utils.dependencies import get_current_admin_user
from propertyhub.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.post("/clear", summary="Clear cached responses")
async def clear_cache(
    request_data: Optional[CacheClearRequest] = None,
    current_user: User = Depends(get_current_admin_user),
    cache: CacheBackend = Depends(get_cache_backend)
) -> Dict[str, Any]:
    """
    Clear one namespace (`cacheKey`) or, without a body, every namespace.

    Raises:
        ValidationError: If `cacheKey` is not a known namespace
    """
    namespace = request_data.cache_key if request_data else None

    if namespace:
        if namespace not in CACHE_POLICIES:
            raise ValidationError(
                f"Unknown cache key '{namespace}'. Must be one of: {', '.join(sorted(CACHE_POLICIES))}"
            )
        await cache.clear(namespace)
        message = f"Cache '{namespace}' cleared successfully"
    else:
        await cache.clear()
        message = "All caches cleared successfully"

    logger.info(message, extra={"user_id": current_user.id})
    return {"success": True, "message": message}
