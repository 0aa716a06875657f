"""Shift Tracker — FastAPI Application Factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shift_tracker.admin.router import router as admin_router
from shift_tracker.auth.credentials import InMemoryCredentialStore
from shift_tracker.auth.router import router as session_router
from shift_tracker.auth.views import RoleRouter
from shift_tracker.common.exceptions import register_exception_handlers
from shift_tracker.common.log import configure_logging
from shift_tracker.common.rate_limit import limiter
from shift_tracker.config import settings
from shift_tracker.database import async_session_factory
from shift_tracker.employees.router import router as employees_router
from shift_tracker.employees.seed import SEEDED_MANAGERS, seed_managers
from shift_tracker.review.router import router as review_router
from shift_tracker.shifts.router import router as shifts_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the section managers before serving."""
    async with async_session_factory() as session:
        await seed_managers(session)
        await session.commit()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Shift Tracker",
        description="Employee shift attendance: registration, submission, review and export",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Credential store + role router, shared by every request
    app.state.role_router = RoleRouter(
        InMemoryCredentialStore(settings.manager_passwords),
        SEEDED_MANAGERS,
    )

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
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(session_router, prefix="/api/v1/session", tags=["session"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(shifts_router, prefix="/api/v1/shifts", tags=["shifts"])
    app.include_router(review_router, prefix="/api/v1/review", tags=["review"])
    app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])

    return app


app = create_app()
