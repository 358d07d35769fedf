"""
Purchase Orders API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.security import Actor
from biztrack.schemas.common import MessageResponse
from biztrack.schemas.purchase import PurchaseCreate, PurchaseOrder, PurchaseStatusUpdate, PaymentCreate
from biztrack.services.purchasing.purchase_orders import PurchaseOrderService

router = APIRouter()


@router.post("/", response_model=PurchaseOrder, status_code=status.HTTP_201_CREATED)
def create_purchase(
    data: PurchaseCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return PurchaseOrderService(db, current_user).create_purchase(data)


@router.get("/{purchase_id}", response_model=PurchaseOrder)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return PurchaseOrderService(db, current_user).get_purchase(purchase_id)


@router.put("/{purchase_id}/status", response_model=PurchaseOrder)
def update_purchase_status(
    purchase_id: int,
    data: PurchaseStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Change purchase status. Receiving applies stock and closes linked reorders.
    """
    return PurchaseOrderService(db, current_user).update_status(purchase_id, data.status)


@router.delete("/{purchase_id}", response_model=MessageResponse)
def delete_purchase(
    purchase_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    PurchaseOrderService(db, current_user).delete_purchase(purchase_id)
    return {"message": "Purchase order deleted"}


@router.post("/{purchase_id}/payments", response_model=PurchaseOrder)
def record_purchase_payment(
    purchase_id: int,
    data: PaymentCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return PurchaseOrderService(db, current_user).record_payment(purchase_id, data)
