"""
Reorder Schemas
Requests, responses and analytics for the replenishment engine
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Any, List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from biztrack.schemas.common import Pagination
from biztrack.schemas.stock import StockItemSummary, SupplierSummary, ItemReorderStatus


class ReorderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class TriggerType(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    OUT_OF_STOCK = "out_of_stock"


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Analytics

class AnalyticsCalculations(BaseModel):
    total_sold_90_days: int = 0
    annual_demand: int = 0
    safety_stock: int = 0
    lead_time_days: int = 0
    review_period: int = 0


class ReorderAnalytics(BaseModel):
    """Result of the replenishment calculation for one item"""
    suggested_quantity: int
    average_daily_sales: float
    current_stock: int
    reorder_level: int
    days_until_stockout: int
    calculations: Optional[AnalyticsCalculations] = None


class LowStockEntry(BaseModel):
    item: StockItemSummary
    analytics: ReorderAnalytics
    priority: int
    urgency_level: UrgencyLevel


class LowStockReport(BaseModel):
    data: List[LowStockEntry]
    pagination: Pagination


class LowStockFilters(BaseModel):
    category: Optional[str] = None
    supplier: Optional[str] = None
    reorder_status: Optional[ItemReorderStatus] = None
    urgency: Optional[UrgencyLevel] = None


class ReorderFilters(BaseModel):
    status: Optional[ReorderStatus] = None
    stock_item_id: Optional[int] = None
    supplier_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# Requests

class ReorderCreate(BaseModel):
    """Manual reorder request"""
    stock_item_id: int
    supplier_id: Optional[int] = None
    suggested_quantity: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None


class QuickReorderCreate(BaseModel):
    """Restock that is already in hand"""
    stock_item_id: int
    quantity: int
    supplier_id: Optional[int] = None
    notes: Optional[str] = None


class BulkReorderItem(BaseModel):
    stock_item_id: int
    quantity: int
    supplier_id: Optional[int] = None


class BulkReorderRequest(BaseModel):
    items: List[BulkReorderItem]


class PurchaseFromReorderRequest(BaseModel):
    quantity: Optional[int] = Field(None, gt=0)
    expected_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None


class MarkReceivedRequest(BaseModel):
    received_quantity: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class CancelReorderRequest(BaseModel):
    notes: Optional[str] = None


# Responses

class Reorder(BaseModel):
    id: int
    reorder_number: str
    stock_item_id: int
    supplier_id: Optional[int] = None
    trigger_type: TriggerType
    triggered_at: datetime
    triggered_by_id: Optional[str] = None
    triggered_by_name: Optional[str] = None
    triggered_by_role: Optional[str] = None
    stock_at_trigger: int
    reorder_level: int
    suggested_quantity: int
    status: ReorderStatus
    purchase_order_id: Optional[int] = None
    ordered_quantity: Optional[int] = None
    received_quantity: Optional[int] = None
    resolved_at: Optional[datetime] = None
    resolved_by_id: Optional[str] = None
    resolved_by_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    stock_item: Optional[StockItemSummary] = None
    supplier: Optional[SupplierSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ReorderList(BaseModel):
    data: List[Reorder]
    pagination: Pagination


class QuickReorderResult(BaseModel):
    reorder: Reorder
    purchase_order_id: int
    purchase_number: str
    previous_stock: int
    new_stock: int


class BulkReorderResult(BaseModel):
    reorders: List[Reorder]
    purchase_order_ids: List[int]
    message: str


class ReorderStats(BaseModel):
    low_stock_items: int
    out_of_stock_items: int
    pending_reorders: int
    ordered_reorders: int
    estimated_reorder_value: Decimal

    @field_validator("estimated_reorder_value", mode="before")
    @classmethod
    def default_zero(cls, v: Any):
        return v if v is not None else Decimal("0")
