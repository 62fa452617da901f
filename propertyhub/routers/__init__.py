"""
API route handlers for the PropertyHub API.
"""

from .blog import router as blog_router
from .cache import router as cache_router
from .content import team_router, testimonials_router
from .developers import router as developers_router
from .document_requests import router as document_requests_router
from .inquiries import router as inquiries_router, offplan_router as offplan_inquiries_router
from .messages import contact_router, router as messages_router
from .properties import router as properties_router
from .users import router as users_router

__all__ = [
    "blog_router",
    "cache_router",
    "team_router",
    "testimonials_router",
    "developers_router",
    "document_requests_router",
    "inquiries_router",
    "offplan_inquiries_router",
    "contact_router",
    "messages_router",
    "properties_router",
    "users_router",
]
