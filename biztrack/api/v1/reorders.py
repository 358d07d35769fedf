"""
Reorder API endpoints
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.security import Actor
from biztrack.schemas.reorder import (
    Reorder, ReorderList, ReorderCreate, QuickReorderCreate, QuickReorderResult,
    BulkReorderRequest, BulkReorderResult, PurchaseFromReorderRequest, MarkReceivedRequest,
    CancelReorderRequest, ReorderFilters, ReorderStatus, LowStockFilters, LowStockReport,
    ReorderStats, UrgencyLevel,
)
from biztrack.schemas.stock import ItemReorderStatus
from biztrack.services.reorder.lifecycle import ReorderLifecycleService

router = APIRouter()


@router.get("/low-stock", response_model=LowStockReport)
def get_low_stock_report(
    category: Optional[str] = None,
    supplier: Optional[str] = None,
    reorder_status: Optional[ItemReorderStatus] = None,
    urgency: Optional[UrgencyLevel] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Low and out of stock items with analytics, sorted by priority.
    """
    filters = LowStockFilters(category=category, supplier=supplier, reorder_status=reorder_status, urgency=urgency)
    return ReorderLifecycleService(db, current_user).get_low_stock_report(filters, page=page, limit=limit)


@router.get("/stats", response_model=ReorderStats)
def get_reorder_stats(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return ReorderLifecycleService(db, current_user).get_reorder_stats()


@router.get("/", response_model=ReorderList)
def list_reorders(
    status_filter: Optional[ReorderStatus] = Query(None, alias="status"),
    stock_item_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Retrieve reorders, oldest first, with optional filtering.
    """
    filters = ReorderFilters(
        status=status_filter,
        stock_item_id=stock_item_id,
        supplier_id=supplier_id,
        start_date=date_from,
        end_date=date_to,
    )
    return ReorderLifecycleService(db, current_user).list_reorders(filters, page=page, limit=limit)


@router.post("/", response_model=Reorder, status_code=status.HTTP_201_CREATED)
def create_reorder(
    data: ReorderCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Create a manual reorder request.
    """
    return ReorderLifecycleService(db, current_user).create_reorder(data)


@router.post("/quick", response_model=QuickReorderResult, status_code=status.HTTP_201_CREATED)
def create_quick_reorder(
    data: QuickReorderCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Restock immediately and book a received purchase order.
    """
    return ReorderLifecycleService(db, current_user).create_quick_reorder(data)


@router.post("/bulk", response_model=BulkReorderResult, status_code=status.HTTP_201_CREATED)
def create_bulk_reorder(
    data: BulkReorderRequest,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Order several items at once, one purchase order per supplier.
    """
    return ReorderLifecycleService(db, current_user).create_bulk_reorder(data.items)


@router.get("/{reorder_id}", response_model=Reorder)
def get_reorder(
    reorder_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return ReorderLifecycleService(db, current_user).get_reorder(reorder_id)


@router.put("/{reorder_id}/approve", response_model=Reorder)
def approve_reorder(
    reorder_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return ReorderLifecycleService(db, current_user).approve_reorder(reorder_id)


@router.post("/{reorder_id}/purchase", response_model=Reorder, status_code=status.HTTP_201_CREATED)
def create_purchase_from_reorder(
    reorder_id: int,
    data: Optional[PurchaseFromReorderRequest] = None,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Generate a pending purchase order for the reorder's supplier.
    """
    return ReorderLifecycleService(db, current_user).create_purchase_from_reorder(reorder_id, data)


@router.put("/{reorder_id}/cancel", response_model=Reorder)
def cancel_reorder(
    reorder_id: int,
    data: Optional[CancelReorderRequest] = None,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    notes = data.notes if data else None
    return ReorderLifecycleService(db, current_user).cancel_reorder(reorder_id, notes=notes)


@router.put("/{reorder_id}/received", response_model=Reorder)
def mark_reorder_received(
    reorder_id: int,
    data: Optional[MarkReceivedRequest] = None,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return ReorderLifecycleService(db, current_user).mark_reorder_received(reorder_id, data)
