"""
Visitor Kiosk API
Main application file
"""

from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from app.core.config import settings
from app.core.database import engine, Base
from app.core.exceptions import setup_exception_handlers
from app.routers import notification, staff, visitor
from app import models  # noqa: F401  registers tables on Base.metadata

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.log_format
)
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application
# ============================================================================

docs_url = "/docs" if not settings.is_production else None
redoc_url = "/redoc" if not settings.is_production else None

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Visitor check-in/check-out kiosk with host approval and a polling notification feed",
    docs_url=docs_url,
    redoc_url=redoc_url,
)

setup_exception_handlers(app)

# ============================================================================
# CORS Configuration
# ============================================================================

if settings.API_CORS_ORIGINS and settings.API_CORS_ORIGINS.strip() == "*":
    # Allow all origins (credentials must be False)
    origins = ["*"]
    allow_credentials = False
else:
    origins = list(settings.cors_origins)
    if settings.API_CORS_ORIGINS:
        origins.extend(o.strip() for o in settings.API_CORS_ORIGINS.split(",") if o.strip())
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Root & Health Endpoints
# ============================================================================

@app.get("/", tags=["Root"])
def root():
    """Root endpoint - API information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "documentation": docs_url,
        "endpoints": {
            "health": "/health",
            "visitors": "/api/visitors",
            "notifications": "/api/notifications",
            "staff": "/api/staff"
        }
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for API monitoring"""
    return {
        "status": "ok",
        "message": f"{settings.app_name} is running",
        "version": settings.app_version,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

# ============================================================================
# Event Handlers
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {engine.url.render_as_string(hide_password=True)}")
    logger.info(f"CORS Origins: {settings.API_CORS_ORIGINS or 'Default'}")
    logger.info(f"Strict notification visibility: {settings.notification_strict_visibility}")
    logger.info("=" * 60)

    # Create database tables if they don't exist
    try:
        logger.info("Ensuring database tables exist...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ready")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        logger.warning("Application will continue, but database operations may fail")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to perform on application shutdown"""
    logger.info("=" * 60)
    logger.info(f"Shutting down {settings.app_name}")
    logger.info("=" * 60)

# ============================================================================
# Router Registration
# ============================================================================

app.include_router(visitor.router)  # Visitor check-in, approval and check-out
app.include_router(notification.router)  # Polling notification feed
app.include_router(staff.router)  # Staff directory
