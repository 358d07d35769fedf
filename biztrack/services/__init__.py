"""
BizTrack Business Services
Stock, reorder, purchasing and notification services
"""

# Importing the lifecycle module registers its purchase.received subscriber
from .reorder.lifecycle import ReorderLifecycleService
from .stock.stock_ledger import StockLedgerService
from .stock.reconciliation import StockReconciliationService
from .purchasing.purchase_orders import PurchaseOrderService
from .notifications.synchronizer import NotificationSynchronizer
from .sales import SalesService
