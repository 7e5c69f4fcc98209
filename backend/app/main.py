"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import Settings, settings as default_settings
from app.error_handlers import register_exception_handlers
from app.logging_config import setup_logging
from app.services.auth_service import AuthService
from app.services.image_storage import LocalImageStorage
from app.services.seed import seed_store
from app.services.store import Store

# Import routers
from app.routers import auth, users, events, providers, permissions, event_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the store once per process, seed it, and dispose of it on shutdown."""
    settings: Settings = app.state.settings
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    store = Store(settings.DATABASE_URL)
    app.state.store = store
    if settings.SEED_ON_STARTUP:
        seed_store(store, AuthService(store, settings).hash_password)
    logger.info("Store ready (%s)", settings.DATABASE_URL)
    try:
        yield
    finally:
        store.close()
        logger.info("Store closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around its own settings and store."""
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Event Permissions API",
        description="Events, custom attributes, providers and per-attribute permissions for submitted data",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.image_storage = LocalImageStorage(
        settings.UPLOAD_DIR, max_bytes=settings.MAX_IMAGE_SIZE_MB * 1024 * 1024
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(events.router, prefix="/api/events", tags=["Events"])
    app.include_router(providers.router, prefix="/api/providers", tags=["Providers"])
    app.include_router(permissions.router, prefix="/api/permissions", tags=["Permissions"])
    app.include_router(event_data.router, prefix="/api/event-data", tags=["EventData"])

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "message": "Event Permissions API is running"}

    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
    return app


app = create_app()
