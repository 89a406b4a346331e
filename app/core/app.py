"""
FastAPI Application Factory
Creates and configures the FastAPI app instance
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.endpoints import catalog, configure, health, manifest, meta, playback, stream
from app.core.config import settings
from app.services.jellyfin import JellyfinError
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

PLAYBACK_PATHS = ("/playback/progress", "/playback/stop")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} addon {settings.APP_VERSION}")
    logger.info(f"Base URL: {settings.BASE_URL}")
    logger.info(f"Jellyfin URL: {settings.JELLYFIN_URL} (public: {settings.public_url})")

    yield

    logger.info(f"Shutting down {settings.APP_NAME} addon")


async def jellyfin_error_handler(request: Request, exc: JellyfinError) -> JSONResponse:
    """Jellyfin failures surface as 502 instead of a generic 500"""
    logger.error(f"Jellyfin error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Playback reports answer malformed bodies with 400 {"error"}, other routes keep 422"""
    if not request.url.path.endswith(PLAYBACK_PATHS):
        return await request_validation_exception_handler(request, exc)

    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(f"Rejected playback report on {request.url.path}: {problems}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {problems}"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Jellio Stremio Addon",
        description="Browse and play a Jellyfin library from Stremio",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Stremio clients call the addon cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(JellyfinError, jellyfin_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(configure.router)
    app.include_router(manifest.router)
    app.include_router(catalog.router)
    app.include_router(meta.router)
    app.include_router(stream.router)
    app.include_router(playback.router)

    return app
