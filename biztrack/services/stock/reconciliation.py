"""
Stock Reconciliation Service
Applies sale, purchase receipt, restock and reversal deltas to the ledger
"""
from collections import OrderedDict
from typing import Any, Dict, Iterable, List
from decimal import Decimal
from sqlalchemy.orm import Session
import logging

from biztrack.core.exceptions import InsufficientStockError
from biztrack.models.stock import StockItem
from biztrack.services.stock.stock_ledger import StockLedgerService
from biztrack.services.notifications.synchronizer import NotificationSynchronizer

logger = logging.getLogger(__name__)


class StockReconciliationService:
    """
    Stock reconciliation hooks

    Lines are any objects with ``stock_item_id`` and ``quantity``
    attributes (request schemas or stored lines). Nothing here commits;
    the calling service owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ledger = StockLedgerService(db)

    def _totals(self, lines: Iterable) -> "OrderedDict[int, int]":
        totals: "OrderedDict[int, int]" = OrderedDict()
        for line in lines:
            totals[line.stock_item_id] = totals.get(line.stock_item_id, 0) + line.quantity
        return totals

    def check_availability(self, lines: Iterable) -> List[Dict[str, Any]]:
        """Return one problem entry per offending line; empty when all lines can be taken"""
        lines = list(lines)
        problems = []
        items: Dict[int, StockItem] = {}

        for line in lines:
            item = items.get(line.stock_item_id) or self.db.get(StockItem, line.stock_item_id)
            if item is None:
                problems.append({
                    "stock_item_id": line.stock_item_id,
                    "requested": line.quantity,
                    "reason": "Item not found",
                })
                continue
            items[item.id] = item
            if line.quantity <= 0:
                problems.append({
                    "stock_item_id": item.id,
                    "name": item.name,
                    "requested": line.quantity,
                    "reason": "Quantity must be greater than zero",
                })

        # Several lines may draw on the same item
        for item_id, requested in self._totals(line for line in lines if line.quantity > 0).items():
            item = items.get(item_id)
            if item is not None and item.quantity < requested:
                problems.append({
                    "stock_item_id": item.id,
                    "name": item.name,
                    "requested": requested,
                    "available": item.quantity,
                    "reason": f"Insufficient stock for {item.name}. Available: {item.quantity}, Requested: {requested}",
                })
        return problems

    def _take(self, lines: Iterable, action: str) -> List[int]:
        lines = list(lines)
        problems = self.check_availability(lines)
        if problems:
            raise InsufficientStockError(problems, message=f"Cannot {action}: insufficient stock")

        totals = self._totals(lines)
        for item_id, quantity in totals.items():
            if not self.ledger.decrement_with_floor(item_id, quantity):
                # lost a race with a concurrent decrement
                item = self.ledger.get_item(item_id)
                raise InsufficientStockError([{
                    "stock_item_id": item_id,
                    "name": item.name,
                    "requested": quantity,
                    "available": item.quantity,
                    "reason": f"Stock for {item.name} changed while processing",
                }], message=f"Cannot {action}: insufficient stock")
        return list(totals.keys())

    def _give(self, lines: Iterable) -> List[int]:
        totals = self._totals(lines)
        for item_id, quantity in totals.items():
            self.ledger.increment(item_id, quantity)
        return list(totals.keys())

    def apply_sale(self, lines: Iterable) -> List[int]:
        """Take every sale line off stock or none of them"""
        item_ids = self._take(lines, "complete sale")
        logger.info(f"Sale decremented stock for items {item_ids}")
        return item_ids

    def reverse_sale(self, lines: Iterable) -> List[int]:
        return self._give(lines)

    def apply_purchase_receipt(self, lines: Iterable) -> List[int]:
        lines = [line for line in lines if line.stock_item_id is not None]
        item_ids = self._give(lines)
        for line in lines:
            cost = getattr(line, "cost", None)
            if cost:
                self.ledger.get_item(line.stock_item_id).last_purchase_price = Decimal(str(cost))
        logger.info(f"Purchase receipt incremented stock for items {item_ids}")
        return item_ids

    def reverse_purchase_receipt(self, lines: Iterable) -> List[int]:
        return self._take([line for line in lines if line.stock_item_id is not None], "reverse purchase")

    def apply_restock(self, item: StockItem, quantity: int) -> int:
        """Add quantity to an item and return the new quantity"""
        self.ledger.increment(item.id, quantity)
        return item.quantity

    def evaluate_stock_alerts(self, item_ids: Iterable[int]) -> int:
        """
        Hand each item to the low-stock check after a decrement.
        Alert failures are logged and never raised.
        """
        synchronizer = NotificationSynchronizer(self.db)
        raised = 0
        for item_id in item_ids:
            try:
                item = self.db.get(StockItem, item_id)
                if item is not None and synchronizer.check_stock_alert(item) is not None:
                    raised += 1
            except Exception as e:
                logger.error(f"Stock alert check failed for item {item_id}: {e}", exc_info=True)
        return raised
