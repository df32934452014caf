"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080

    # Or
    python -m api
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.context import AppContext, build_context
from config.settings import Settings, get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware
from core.responses import register_exception_handlers


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging

    Runs on shutdown:
    - Drop cached responses
    """
    ctx: AppContext = app.state.context
    settings = ctx.settings

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting wardrobe API",
        environment=settings.environment,
        backend=settings.catalog_backend,
        port=settings.port,
    )

    yield

    ctx.cache.invalidate()
    logger.info("Shutting down wardrobe API")


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: get_settings())
        context: Prebuilt context, e.g. with in-memory stores for tests

    Returns:
        Configured FastAPI application
    """
    settings = settings or (context.settings if context else get_settings())
    context = context or build_context(settings)

    app = FastAPI(
        title="Wardrobe API",
        description="""
        Clothing and outfit management with recommendations and search.

        ## Main Endpoints

        - `/api/clothing` - Clothing CRUD and batch operations
        - `/api/outfits` - Outfit CRUD and stats
        - `/api/recommend` - Seasonal, similar, random and smart recommendations
        - `/api/search` - Ranked search, suggestions, popular terms
        - `/api/upload` - Image upload and background removal
        - `/api/health` - Health checks
        """,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.context = context

    # =========================================================================
    # Middleware (order matters - first added = innermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing (adds X-Request-ID, logs timing)
    app.add_middleware(RequestTracingMiddleware, api_version=settings.api_version)

    register_exception_handlers(app, include_details=not settings.is_production)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes import clothing, health, outfits, recommend, search, upload

    app.include_router(health.router)
    app.include_router(clothing.router)
    app.include_router(outfits.router)
    app.include_router(recommend.router)
    app.include_router(search.router)
    app.include_router(upload.router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()
