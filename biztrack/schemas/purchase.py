"""Purchase Order Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class PurchaseLineCreate(BaseModel):
    stock_item_id: int
    quantity: int = Field(..., gt=0)
    cost: Optional[Decimal] = Field(None, ge=0, description="Defaults to the item's last purchase price or cost")


class PurchaseCreate(BaseModel):
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = Field(None, max_length=100)
    lines: List[PurchaseLineCreate] = Field(..., min_length=1)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    shipping: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str = "cash"
    status: PurchaseStatus = PurchaseStatus.PENDING
    expected_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None


class PurchaseStatusUpdate(BaseModel):
    status: PurchaseStatus


class PaymentCreate(BaseModel):
    amount: Decimal
    method: str = "cash"
    notes: Optional[str] = None


class PurchaseOrderLine(BaseModel):
    id: int
    stock_item_id: Optional[int] = None
    name: str
    quantity: int
    cost: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class Payment(BaseModel):
    id: int
    amount: Decimal
    method: str
    paid_at: datetime
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrder(BaseModel):
    id: int
    purchase_number: str
    supplier_id: Optional[int] = None
    supplier_name: str
    supplier_email: Optional[str] = None
    supplier_phone: Optional[str] = None
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    payment_method: str
    payment_status: PaymentStatus
    paid_amount: Decimal
    status: PurchaseStatus
    expected_delivery_date: Optional[datetime] = None
    received_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_by_id: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: datetime
    lines: List[PurchaseOrderLine] = []
    payments: List[Payment] = []

    model_config = ConfigDict(from_attributes=True)
