"""
FastAPI main application.

Handles:
- Application initialization
- Middleware configuration
- Route mounting
- CORS setup
- Startup/shutdown events
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import VidLinkError
from vidlinkgen.api.routes import admin, analytics, auth, links, pricing, support, viewer

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Shareable video links with password, expiry and email access control",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded files for the local storage backend
if settings.storage_backend == "local":
    app.mount(
        settings.media_url_prefix,
        StaticFiles(directory=settings.local_storage_path, check_dir=False),
        name="media",
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Storage backend: {settings.storage_backend}")

    if settings.auto_create_tables:
        from vidlinkgen.db.base import Base, engine
        import vidlinkgen.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")

    logger.info("Application startup complete")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down application")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.debug else "Documentation disabled in production",
        "health": "/health"
    }


# Mount API routes
app.include_router(
    auth.router,
    prefix=f"{settings.api_v1_prefix}/auth",
    tags=["auth"]
)

app.include_router(
    links.router,
    prefix=f"{settings.api_v1_prefix}/links",
    tags=["links"]
)

app.include_router(
    pricing.router,
    prefix=f"{settings.api_v1_prefix}/pricing",
    tags=["pricing"]
)

app.include_router(
    support.router,
    prefix=f"{settings.api_v1_prefix}/support",
    tags=["support"]
)

app.include_router(
    admin.router,
    prefix=f"{settings.api_v1_prefix}/admin",
    tags=["admin"]
)

# Public short links and analytics pages keep their historical paths
app.include_router(
    viewer.router,
    prefix="/v",
    tags=["viewer"]
)

app.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"]
)


# Exception handlers
@app.exception_handler(VidLinkError)
async def vidlink_error_handler(request: Request, exc: VidLinkError):
    """Render domain errors with their code and user-facing message."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail()}
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc):
    """Handle ValueError exceptions."""
    return JSONResponse(
        status_code=400,
        content={"detail": {"error": "validation_error", "message": str(exc)}}
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    """Handle uncaught exceptions."""
    logger.error(f"Uncaught exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "internal_error", "message": "An unexpected error occurred. Please try again."}}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vidlinkgen.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
