"""
Main FastAPI application entry point.

Run: uvicorn student_registry.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import sys

from student_registry.core.config import settings
from student_registry.core.errors import register_exception_handlers
from student_registry.core.logging import audit_log
from student_registry.db.mongodb import init_mongodb, close_mongodb

# Import routers
from student_registry.api.student import router as student_router
from student_registry.api.user import router as user_router


def _mask_url(url: str) -> str:
    """Mask password in database URLs for logging."""
    if '@' in url:
        # Split at @ to separate credentials from host
        parts = url.split('@')
        creds = parts[0]
        host = '@'.join(parts[1:])
        # Mask the password
        if ':' in creds.split('://', 1)[-1]:
            scheme_user = creds.rsplit(':', 1)[0]
            return f"{scheme_user}:****@{host}"
    return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Opens and closes the MongoDB connection.
    Fails fast if the connection fails.
    """
    audit_log.info(
        "app.starting",
        details={
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "debug": settings.DEBUG,
            "mongodb": _mask_url(settings.mongo_url),
        }
    )

    try:
        await init_mongodb()
    except Exception as e:
        audit_log.error("app.mongodb.connect_failed", error=str(e))
        sys.exit(1)

    audit_log.info("app.ready")

    yield

    # Shutdown
    await close_mongodb()
    audit_log.info("app.stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Student and user record management",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(student_router, prefix=settings.API_PREFIX)
app.include_router(user_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """
    Detailed health check that verifies the database connection.
    """
    from student_registry.db.mongodb import mongodb

    health = {
        "status": "healthy",
        "databases": {}
    }

    try:
        await mongodb.db.command("ping")
        health["databases"]["mongodb"] = "connected"
    except Exception as e:
        health["databases"]["mongodb"] = f"error: {str(e)}"
        health["status"] = "unhealthy"

    return health
