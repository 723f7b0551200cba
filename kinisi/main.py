"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kinisi.api.routes import onboarding_router, programs_router
from kinisi.config.settings import get_settings
from kinisi.core.error_handlers import domain_error_handler, unhandled_error_handler
from kinisi.core.exceptions import DomainError
from kinisi.core.logging import configure_logging, get_logger
from kinisi.db.database import close_engine, init_db
from kinisi.middleware.request_id import RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db()
    logger.info("startup_complete")
    yield
    await close_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Onboarding backend that places generated exercise programs on the calendar",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    app.include_router(programs_router, prefix="/programs", tags=["programs"])
    app.include_router(onboarding_router, prefix="/onboarding", tags=["onboarding"])

    return app


app = create_app()
