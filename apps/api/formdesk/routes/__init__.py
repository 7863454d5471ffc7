"""Route modules."""

from .auth import router as auth_router
from .submissions import router as submissions_router
from .users import router as users_router

__all__ = ["auth_router", "submissions_router", "users_router"]
