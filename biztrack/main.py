"""
BizTrack FastAPI Main Application
Entry point for the reorder and stock-replenishment REST API
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from biztrack.core.config import settings
from biztrack.core.database import check_db_connection, init_db
from biztrack.core.exceptions import BizTrackException
from biztrack.core.logging import setup_logging
from biztrack.api.v1.api_router import api_router

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## BizTrack Reorder & Stock-Replenishment API

    ### Key Features:
    - **Replenishment analytics**: demand rate, stockout horizon and suggested quantity
    - **Low-stock report**: items ranked by priority and urgency
    - **Reorder lifecycle**: manual, quick and bulk reorders through approval, ordering and receipt
    - **Purchase orders**: generated per supplier from reorders
    - **Notifications**: recent and archive views kept in sync
    """,
    docs_url=settings.DOCS_URL,
    redoc_url=settings.REDOC_URL,
    openapi_url=settings.OPENAPI_URL,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers

    Returns system status and database connectivity
    """
    try:
        db_status = check_db_connection()

        return {
            "status": "healthy" if db_status else "degraded",
            "version": settings.APP_VERSION,
            "database": "connected" if db_status else "disconnected",
            "debug": settings.DEBUG
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")


# System information endpoint
@app.get("/info", tags=["System"])
async def system_info():
    """
    System information endpoint
    """
    return {
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_version": "v1",
        "docs_url": settings.DOCS_URL,
        "features": [
            "Replenishment Analytics",
            "Low Stock Report",
            "Reorder Lifecycle",
            "Purchase Order Generation",
            "Notification Synchronization",
        ],
        "settings": {
            "analytics_window_days": settings.ANALYTICS_WINDOW_DAYS,
            "review_period_days": settings.REVIEW_PERIOD_DAYS,
            "recent_alert_limit": settings.RECENT_ALERT_LIMIT,
        },
    }


# Application startup event
@app.on_event("startup")
async def startup_event():
    """
    Application startup tasks

    Verify the database and create missing tables
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if not check_db_connection():
        logger.error("Failed to connect to database on startup")
        raise RuntimeError("Database connection failed")

    init_db()
    logger.info("Application startup completed successfully")


# Application shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


@app.exception_handler(BizTrackException)
async def biztrack_exception_handler(request: Request, exc: BizTrackException):
    """
    Domain errors: not found, validation, conflict and insufficient stock
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "details": None,
        }
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "biztrack.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
