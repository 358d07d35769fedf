"""Stock Item Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ItemReorderStatus(str, Enum):
    NONE = "none"
    NEEDED = "needed"
    PENDING = "pending"
    ORDERED = "ordered"


class StockItemBase(BaseModel):
    sku: str = Field(..., min_length=1, max_length=40)
    name: str = Field(..., min_length=1, max_length=120)
    category: str = Field(default="Other", max_length=60)
    price: Decimal = Field(default=0, ge=0)
    cost: Decimal = Field(default=0, ge=0)
    reorder_level: int = Field(default=15, ge=0)
    reorder_quantity: int = Field(default=10, ge=0)
    maximum_stock: int = Field(default=100, ge=0)
    lead_time_days: int = Field(default=7, ge=0)
    safety_stock: int = Field(default=5, ge=0)
    preferred_supplier_id: Optional[int] = None
    supplier: str = Field(default="", max_length=100)
    location: str = Field(default="Warehouse", max_length=60)


class StockItemCreate(StockItemBase):
    quantity: int = Field(default=0, ge=0)
    last_purchase_price: Decimal = Field(default=0, ge=0)


class StockItem(StockItemBase):
    id: int
    quantity: int
    last_purchase_price: Decimal
    reorder_status: ItemReorderStatus
    pending_order_id: Optional[int] = None
    last_reorder_date: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StockItemSummary(BaseModel):
    """Item fields embedded in reorder responses"""
    id: int
    sku: str
    name: str
    category: str
    price: Decimal
    cost: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class SupplierSummary(BaseModel):
    id: int
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
