"""
FastAPI application for the blog API.

`create_app()` wires settings, storage and services into a fresh app;
the module-level `app` is what uvicorn serves.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogapi.api import comments, posts
from blogapi.api.deps import AppServices
from blogapi.api.errors import register_exception_handlers
from blogapi.auth.routes import router as auth_router
from blogapi.config import Settings, get_settings
from blogapi.core.utils import configure_logging
from blogapi.integrations.sentry import init_sentry
from blogapi.storage import StorageProvider, create_local_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.services.settings
    logger.info("Blog API starting in %s mode", settings.environment)
    
    yield
    
    logger.info("Blog API shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """
    Build the application.
    
    Args:
        settings: Defaults to the cached environment settings
        storage: Defaults to in-memory storage
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    
    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")
    
    app = FastAPI(
        title="Blog API",
        description="Posts and comments behind JWT authentication",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.state.services = AppServices.build(settings, storage or create_local_storage())
    
    register_exception_handlers(app)
    
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(posts.router, prefix=settings.api_prefix)
    app.include_router(comments.router, prefix=settings.api_prefix)
    
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "blogapi"}
    
    return app


app = create_app()
