"""
Notification Schemas
Recent (layout bar) and archive views of the alert stream
"""

from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from biztrack.schemas.common import Pagination


class NotificationType(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    SYSTEM = "system"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_MADE = "payment_made"
    REORDER_NEEDED = "reorder_needed"
    REORDER_CREATED = "reorder_created"
    REORDER_APPROVED = "reorder_approved"
    AUTO_REORDER = "auto_reorder"
    LOW_STOCK_PURCHASE = "low_stock_purchase"
    LOGIN_FAILED = "login_failed"
    LOGIN_SUCCESS = "login_success"
    SECURITY_CHANGE = "security_change"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class RelatedModel(str, Enum):
    PURCHASE = "Purchase"
    SALE = "Sale"
    INVENTORY = "Inventory"
    USER = "User"
    REORDER = "Reorder"
    SUPPLIER = "Supplier"


class NotificationCreate(BaseModel):
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    related_id: Optional[str] = None
    related_model: Optional[RelatedModel] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Notification(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    read: bool
    related_id: Optional[str] = None
    related_model: Optional[RelatedModel] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("details", "metadata"))
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ArchivedNotification(Notification):
    dismissed_from_layout_bar: bool = False


class RecentNotificationList(BaseModel):
    """Capped listing for the layout bar"""
    data: List[Notification]
    total: int
    has_more: bool


class ArchivedNotificationList(BaseModel):
    data: List[ArchivedNotification]
    pagination: Pagination
