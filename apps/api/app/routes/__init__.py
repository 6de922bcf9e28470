"""Route modules."""

from .catalog import router as catalog_router
from .invites import router as invites_router
from .jobs import router as jobs_router
from .users import router as users_router

__all__ = ["catalog_router", "invites_router", "jobs_router", "users_router"]
