"""
BizTrack SQLAlchemy Models
"""

# Import all models to ensure they are registered with SQLAlchemy
from .supplier import Supplier
from .stock import StockItem
from .purchase import PurchaseOrder, PurchaseOrderLine, PurchasePayment
from .sales import Sale, SaleLine, SalePayment
from .reorder import Reorder
from .notification import Notification, NotificationArchive
from .sequence import SequenceCounter

__all__ = [
    "Supplier",
    "StockItem",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchasePayment",
    "Sale",
    "SaleLine",
    "SalePayment",
    "Reorder",
    "Notification",
    "NotificationArchive",
    "SequenceCounter",
]
