"""
Table Bookings - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError
from starlette.middleware.sessions import SessionMiddleware
import uvicorn

from app.core.config import Settings, settings
from app.core.db import Store
from app.core.errors import BookingServiceError, StorageUnavailable
from app.api import routes_admin, routes_auth, routes_bookings, routes_public, ws
from app.api.ws import WebSocketManager
from app.services.booking_service import BookingService
from app.services.catalog_service import CatalogService
from app.services.identity_provider import DiscordIdentityProvider
from app.utils.responses import booking_error_response, error_response

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicit settings object"""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        store = Store(app_settings.DATABASE_URL)
        store.create_schema(one_booking_per_user_per_day=app_settings.ONE_BOOKING_PER_USER_PER_DAY)

        if app_settings.SEED_DEFAULT_CATALOG:
            db = store.session()
            try:
                CatalogService.seed_defaults(db)
            finally:
                db.close()

        websocket_manager = WebSocketManager()
        app.state.settings = app_settings
        app.state.store = store
        app.state.websocket_manager = websocket_manager
        app.state.booking_service = BookingService(app_settings, websocket_manager)
        app.state.identity_provider = DiscordIdentityProvider(app_settings)
        logger.info("Application started")

        yield

        await app.state.identity_provider.close()
        store.dispose()
        logger.info("Application shutdown")

    app = FastAPI(
        title="Table Bookings",
        description="Weekly table booking service with conflict-safe reservations",
        version="1.0.0",
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.SESSION_SECRET,
        max_age=app_settings.SESSION_MAX_AGE,
        same_site="lax",
    )

    @app.exception_handler(BookingServiceError)
    async def booking_error_handler(request: Request, exc: BookingServiceError):
        # Storage errors may carry driver text
        hide_details = isinstance(exc, StorageUnavailable) and not app_settings.DEBUG
        return booking_error_response(exc, include_details=not hide_details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            message="Invalid request",
            error_code="VALIDATION_ERROR",
            details=jsonable_encoder(exc.errors()),
            status_code=400
        )

    @app.exception_handler(OperationalError)
    async def storage_error_handler(request: Request, exc: OperationalError):
        logger.error(f"Storage failure on {request.url.path}: {exc}")
        unavailable = StorageUnavailable(details=str(exc.orig))
        return booking_error_response(unavailable, include_details=app_settings.DEBUG)

    # Include routers
    app.include_router(routes_public.router, tags=["public"])
    app.include_router(routes_auth.router, prefix="/auth", tags=["auth"])
    app.include_router(routes_bookings.router, prefix="/api", tags=["bookings"])
    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
    app.include_router(ws.router, prefix="/ws", tags=["websocket"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {"service": "Table Bookings", "login": "/auth/login", "docs": "/docs"}

    return app

app = create_app()

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
