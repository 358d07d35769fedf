"""
Stock Items API endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.security import Actor
from biztrack.schemas.common import MessageResponse
from biztrack.schemas.stock import StockItem, StockItemCreate
from biztrack.services.stock.stock_ledger import StockLedgerService

router = APIRouter()


@router.get("/items", response_model=List[StockItem])
def list_stock_items(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = None,
    category: Optional[str] = None,
    low_stock_only: bool = False,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Retrieve list of stock items with optional filtering.
    """
    return StockLedgerService(db).list_items(
        skip=skip, limit=limit, search=search, category=category, low_stock_only=low_stock_only
    )


@router.post("/items", response_model=StockItem, status_code=status.HTTP_201_CREATED)
def create_stock_item(
    item_data: StockItemCreate,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return StockLedgerService(db).create_item(item_data)


@router.get("/items/{item_id}", response_model=StockItem)
def get_stock_item(
    item_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return StockLedgerService(db).get_item(item_id)


@router.delete("/items/{item_id}", response_model=MessageResponse)
def delete_stock_item(
    item_id: int,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    Delete a stock item; refused while open orders refer to it.
    """
    StockLedgerService(db).delete_item(item_id)
    return {"message": "Stock item deleted"}
