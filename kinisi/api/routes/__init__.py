"""API routes module."""
from kinisi.api.routes.onboarding import router as onboarding_router
from kinisi.api.routes.programs import router as programs_router

__all__ = [
    "onboarding_router",
    "programs_router",
]
