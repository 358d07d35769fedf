"""
Sales API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.security import Actor
from biztrack.schemas.common import MessageResponse
from biztrack.schemas.purchase import PaymentCreate
from biztrack.schemas.sales import Sale, SaleCreate
from biztrack.services.sales import SalesService

router = APIRouter()


@router.post("/", response_model=Sale, status_code=status.HTTP_201_CREATED)
def create_sale(
    data: SaleCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Record a sale. Rejected in full if any line would oversell.
    """
    return SalesService(db, current_user).create_sale(data)


@router.get("/{sale_id}", response_model=Sale)
def get_sale(
    sale_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return SalesService(db, current_user).get_sale(sale_id)


@router.delete("/{sale_id}", response_model=MessageResponse)
def delete_sale(
    sale_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    SalesService(db, current_user).delete_sale(sale_id)
    return {"message": "Sale deleted and stock restored"}


@router.post("/{sale_id}/payments", response_model=Sale)
def record_sale_payment(
    sale_id: int,
    data: PaymentCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return SalesService(db, current_user).record_payment(sale_id, data)
