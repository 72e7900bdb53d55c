"""LeaveDesk — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from leavedesk import __version__
from leavedesk.auth.router import router as auth_router
from leavedesk.common.exceptions import register_exception_handlers
from leavedesk.common.logging import CorrelationIdMiddleware, setup_logging
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.database import dispose_engine, init_models
from leavedesk.leave.router import router as leave_router
from leavedesk.organizations.router import router as organizations_router
from leavedesk.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    logger.info("Starting LeaveDesk %s (%s)", __version__, settings.ENVIRONMENT)
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    yield
    # Shutdown
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="LeaveDesk",
        description="Leave requests, approvals, balances and supervisor reports",
        version=__version__,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Correlation id for structured logs
    app.add_middleware(CorrelationIdMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/v1/users", tags=["users"])
    app.include_router(organizations_router, prefix="/api/v1/organizations", tags=["organizations"])
    app.include_router(leave_router, prefix="/api/v1/leaves", tags=["leave"])

    return app


app = create_app()
