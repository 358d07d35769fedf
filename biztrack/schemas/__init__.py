"""
BizTrack Pydantic Schemas
Request/Response models for the BizTrack API
"""

from .common import Pagination, ErrorResponse, MessageResponse, CountResponse, BulkResult
from .stock import StockItemCreate, StockItem, StockItemSummary, SupplierSummary, ItemReorderStatus
from .reorder import (
    ReorderStatus, TriggerType, UrgencyLevel,
    ReorderAnalytics, AnalyticsCalculations, LowStockEntry, LowStockReport, LowStockFilters,
    ReorderFilters, ReorderCreate, QuickReorderCreate, BulkReorderItem, BulkReorderRequest,
    PurchaseFromReorderRequest, MarkReceivedRequest, CancelReorderRequest,
    Reorder, ReorderList, QuickReorderResult, BulkReorderResult, ReorderStats
)
from .purchase import (
    PurchaseStatus, PaymentStatus, PurchaseLineCreate, PurchaseCreate,
    PurchaseStatusUpdate, PaymentCreate, PurchaseOrder, Payment
)
from .sales import SaleLineCreate, SaleCreate, Sale
from .notification import (
    NotificationType, RelatedModel, NotificationCreate, Notification,
    ArchivedNotification, RecentNotificationList, ArchivedNotificationList
)
