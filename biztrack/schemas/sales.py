"""Sale Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from biztrack.schemas.purchase import Payment, PaymentStatus


class SaleLineCreate(BaseModel):
    stock_item_id: int
    quantity: int
    price: Optional[Decimal] = Field(None, ge=0, description="Defaults to the item's selling price")


class SaleCreate(BaseModel):
    customer_name: str = Field(default="Walk-in Customer", max_length=100)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    lines: List[SaleLineCreate] = Field(..., min_length=1)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str = "cash"
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class SaleLine(BaseModel):
    id: int
    stock_item_id: int
    name: str
    quantity: int
    price: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class Sale(BaseModel):
    id: int
    invoice_number: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    payment_status: PaymentStatus
    paid_amount: Decimal
    status: str
    notes: Optional[str] = None
    created_by_id: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: datetime
    lines: List[SaleLine] = []
    payments: List[Payment] = []

    model_config = ConfigDict(from_attributes=True)
