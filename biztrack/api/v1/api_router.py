"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter
from biztrack.api.v1 import (
    reorders,
    notifications,
    notification_archive,
    stock,
    sales,
    purchases,
)
from biztrack.schemas.common import ErrorResponse

# Domain errors rendered by the BizTrackException handler
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed or insufficient stock"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Transition not allowed"},
}

api_router = APIRouter(responses=ERROR_RESPONSES)

# Replenishment engine
api_router.include_router(reorders.router, prefix="/reorders", tags=["reorders"])

# Archive first so /notifications/{id} does not capture it
api_router.include_router(notification_archive.router, prefix="/notifications/archive", tags=["notification-archive"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])

# Collaborator primitives
api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
api_router.include_router(sales.router, prefix="/sales", tags=["sales"])
api_router.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
