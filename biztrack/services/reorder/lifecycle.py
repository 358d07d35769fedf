"""
Reorder Lifecycle Service
Creation (manual, quick, bulk), approval, conversion to purchase orders,
cancellation and receipt of reorder requests
"""
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from biztrack.core.exceptions import NotFoundError, ValidationError
from biztrack.core.security import Actor, SYSTEM_ACTOR
from biztrack.models.mixins import utcnow
from biztrack.models.purchase import PurchaseOrder
from biztrack.models.reorder import Reorder
from biztrack.models.stock import StockItem
from biztrack.models.supplier import Supplier
from biztrack.schemas.common import Pagination, page_offset
from biztrack.schemas.notification import NotificationType, RelatedModel
from biztrack.schemas.purchase import PurchaseStatus
from biztrack.schemas.reorder import (
    ReorderStatus, TriggerType, ReorderCreate, QuickReorderCreate, BulkReorderItem,
    PurchaseFromReorderRequest, MarkReceivedRequest, ReorderFilters, LowStockFilters,
    LowStockEntry,
)
from biztrack.schemas.stock import StockItemSummary
from biztrack.services.events import subscribe, PURCHASE_RECEIVED, PURCHASE_CANCELLED
from biztrack.services.notifications.synchronizer import NotificationSynchronizer
from biztrack.services.purchasing.purchase_orders import PurchaseOrderService, OrderLine
from biztrack.services.reorder.analytics import ReplenishmentAnalyticsService
from biztrack.services.reorder.priority import calculate_priority, get_urgency_level
from biztrack.services.reorder.state_machine import ensure_transition, OPEN_STATUSES
from biztrack.services.sequence import SequenceService
from biztrack.services.stock.reconciliation import StockReconciliationService
from biztrack.services.stock.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)

OPEN_STATUS_VALUES = [s.value for s in OPEN_STATUSES]


class ReorderLifecycleService:
    """
    Reorder lifecycle
    Every status change goes through state_machine.ensure_transition
    """

    def __init__(self, db: Session, current_user: Optional[Actor] = None):
        self.db = db
        self.current_user = current_user or SYSTEM_ACTOR
        self.ledger = StockLedgerService(db)
        self.analytics = ReplenishmentAnalyticsService(db)
        self.sequence = SequenceService(db)
        self.purchasing = PurchaseOrderService(db, self.current_user)

    # Reads

    def get_reorder(self, reorder_id: int) -> Reorder:
        reorder = self.db.get(Reorder, reorder_id)
        if not reorder:
            raise NotFoundError(f"Reorder {reorder_id} not found", code="REORDER_NOT_FOUND")
        return reorder

    def list_reorders(self, filters: Optional[ReorderFilters] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        filters = filters or ReorderFilters()
        query = self.db.query(Reorder)

        if filters.status:
            query = query.filter(Reorder.status == filters.status.value)
        if filters.stock_item_id:
            query = query.filter(Reorder.stock_item_id == filters.stock_item_id)
        if filters.supplier_id:
            query = query.filter(Reorder.supplier_id == filters.supplier_id)
        if filters.start_date:
            query = query.filter(Reorder.created_at >= filters.start_date)
        if filters.end_date:
            query = query.filter(Reorder.created_at <= filters.end_date)

        total = query.count()
        reorders = query.order_by(Reorder.created_at, Reorder.id).offset(page_offset(page, limit)).limit(limit).all()
        return {"data": reorders, "pagination": Pagination.build(page, limit, total)}

    def get_low_stock_report(self, filters: Optional[LowStockFilters] = None, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        """Low and out of stock items, highest priority first"""
        filters = filters or LowStockFilters()
        query = self.db.query(StockItem).filter(
            StockItem.is_active.is_(True),
            StockLedgerService.low_stock_condition(),
        )
        if filters.category:
            query = query.filter(StockItem.category == filters.category)
        if filters.supplier:
            query = query.filter(func.lower(StockItem.supplier).like(f"%{filters.supplier.lower()}%"))
        if filters.reorder_status:
            query = query.filter(StockItem.reorder_status == filters.reorder_status.value)

        entries = []
        for item in query.all():
            analytics = self.analytics.analytics_or_default(item)
            priority = calculate_priority(item, analytics)
            entries.append(LowStockEntry(
                item=StockItemSummary.model_validate(item),
                analytics=analytics,
                priority=priority,
                urgency_level=get_urgency_level(priority),
            ))

        if filters.urgency:
            entries = [e for e in entries if e.urgency_level == filters.urgency]
        entries.sort(key=lambda e: e.priority, reverse=True)

        offset = page_offset(page, limit)
        return {
            "data": entries[offset:offset + limit],
            "pagination": Pagination.build(page, limit, len(entries)),
        }

    def get_reorder_stats(self) -> Dict[str, Any]:
        active = self.db.query(StockItem).filter(StockItem.is_active.is_(True))
        low_stock = active.filter(StockLedgerService.low_stock_condition()).count()
        out_of_stock = active.filter(StockItem.quantity <= 0).count()
        pending = self.db.query(Reorder).filter(Reorder.status == ReorderStatus.PENDING.value).count()
        ordered = self.db.query(Reorder).filter(Reorder.status == ReorderStatus.ORDERED.value).count()
        value = self.db.query(
            func.coalesce(func.sum(Reorder.suggested_quantity * StockItem.cost), 0)
        ).join(StockItem, Reorder.stock_item_id == StockItem.id).filter(
            Reorder.status.in_(OPEN_STATUS_VALUES)
        ).scalar()

        return {
            "low_stock_items": low_stock,
            "out_of_stock_items": out_of_stock,
            "pending_reorders": pending,
            "ordered_reorders": ordered,
            "estimated_reorder_value": value,
        }

    # Creation

    def _new_reorder(self, item: StockItem, supplier: Optional[Supplier], trigger: TriggerType,
                     suggested_quantity: int, notes: Optional[str] = None) -> Reorder:
        reorder = Reorder(
            reorder_number=self.sequence.next_reorder_number(),
            stock_item_id=item.id,
            supplier_id=supplier.id if supplier else None,
            trigger_type=trigger.value,
            triggered_at=utcnow(),
            triggered_by_id=self.current_user.user_id,
            triggered_by_name=self.current_user.name,
            triggered_by_role=self.current_user.role,
            stock_at_trigger=item.quantity,
            reorder_level=item.reorder_level,
            suggested_quantity=suggested_quantity,
            status=ReorderStatus.PENDING.value,
            notes=notes,
        )
        self.db.add(reorder)
        return reorder

    def _resolve_supplier(self, item: StockItem, supplier_id: Optional[int]) -> Optional[Supplier]:
        if supplier_id is not None:
            return self.ledger.get_supplier(supplier_id)
        return item.preferred_supplier

    def _resolve(self, reorder: Reorder):
        reorder.resolved_at = utcnow()
        reorder.resolved_by_id = self.current_user.user_id
        reorder.resolved_by_name = self.current_user.name

    def create_reorder(self, data: ReorderCreate) -> Reorder:
        """Manual reorder request"""
        item = self.ledger.get_item(data.stock_item_id)
        supplier = self._resolve_supplier(item, data.supplier_id)
        analytics = self.analytics.calculate_reorder_quantity(item.id)

        try:
            reorder = self._new_reorder(
                item, supplier, TriggerType.MANUAL,
                data.suggested_quantity or analytics.suggested_quantity,
                notes=data.notes,
            )
            self.ledger.mark_reorder_needed(item)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reorder)
        logger.info(f"Reorder {reorder.reorder_number} created for {item.sku} by {self.current_user.name}")
        self._notify(
            NotificationType.REORDER_CREATED,
            "Reorder Request Created",
            f"Manual reorder request created for {item.name} (SKU: {item.sku})",
            reorder,
            {"reorderNumber": reorder.reorder_number, "itemName": item.name,
             "suggestedQuantity": reorder.suggested_quantity},
        )
        return reorder

    def create_quick_reorder(self, data: QuickReorderCreate) -> Dict[str, Any]:
        """
        Record stock that is already in hand.

        Creates the reorder, restocks the item, clears its stock alerts and
        books a received purchase order, all in one commit.
        """
        if data.quantity is None or data.quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", code="INVALID_QUANTITY")

        item = self.ledger.get_item(data.stock_item_id)
        supplier = self._resolve_supplier(item, data.supplier_id)
        previous_stock = item.quantity
        trigger = TriggerType.OUT_OF_STOCK if previous_stock <= 0 else TriggerType.MANUAL

        try:
            reorder = self._new_reorder(item, supplier, trigger, data.quantity, notes=data.notes)
            self.db.flush()

            new_stock = StockReconciliationService(self.db).apply_restock(item, data.quantity)
            self.ledger.clear_reorder_state(item, stamp=True)
            NotificationSynchronizer(self.db).mark_item_alerts_read(item.id)

            po = self.purchasing.generate(
                supplier,
                [OrderLine(item=item, quantity=data.quantity)],
                status=PurchaseStatus.RECEIVED,
                notes=f"Auto-created from reorder {reorder.reorder_number} - Immediate restocking",
            )

            reorder.status = ensure_transition(reorder.status, ReorderStatus.RECEIVED).value
            reorder.purchase_order_id = po.id
            reorder.ordered_quantity = data.quantity
            reorder.received_quantity = data.quantity
            self._resolve(reorder)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reorder)
        logger.info(
            f"Quick reorder {reorder.reorder_number}: {item.sku} restocked "
            f"from {previous_stock} to {new_stock} via {po.purchase_number}"
        )
        self._notify(
            NotificationType.LOW_STOCK_PURCHASE,
            "Low Stock Item Restocked",
            f"Purchase order {po.purchase_number} created for low-stock item \"{item.name}\". "
            f"Stock increased from {previous_stock} to {new_stock} units.",
            po,
            {
                "purchaseNumber": po.purchase_number,
                "reorderNumber": reorder.reorder_number,
                "itemName": item.name,
                "quantity": data.quantity,
                "previousStock": previous_stock,
                "newStock": new_stock,
                "isLowStockPurchase": True,
                "urgency": "critical" if previous_stock <= 0 else "high",
            },
            related_model=RelatedModel.PURCHASE,
        )
        return {
            "reorder": reorder,
            "purchase_order_id": po.id,
            "purchase_number": po.purchase_number,
            "previous_stock": previous_stock,
            "new_stock": new_stock,
        }

    def create_bulk_reorder(self, items: List[BulkReorderItem]) -> Dict[str, Any]:
        """One purchase order per supplier, one ordered reorder per item"""
        if not items:
            raise ValidationError("Items list is required", code="EMPTY_BULK_REORDER")

        resolved = []
        for entry in items:
            if entry.quantity is None or entry.quantity <= 0:
                raise ValidationError(
                    f"Quantity must be greater than zero for item {entry.stock_item_id}",
                    code="INVALID_QUANTITY",
                )
            item = self.ledger.get_item(entry.stock_item_id)
            supplier = self._resolve_supplier(item, entry.supplier_id)
            if supplier is None:
                raise ValidationError(f"No supplier specified for item: {item.name}", code="NO_SUPPLIER")
            resolved.append((supplier, item, entry.quantity))

        purchases: List[PurchaseOrder] = []
        reorders: List[Reorder] = []
        try:
            for group in self.purchasing.group_by_supplier(resolved).values():
                supplier = group[0][0]
                po = self.purchasing.generate(
                    supplier,
                    [OrderLine(item=item, quantity=quantity) for _, item, quantity in group],
                    notes="Created from bulk reorder request",
                )
                purchases.append(po)

                for _, item, quantity in group:
                    reorder = self._new_reorder(item, supplier, TriggerType.MANUAL, quantity)
                    reorder.status = ensure_transition(reorder.status, ReorderStatus.ORDERED).value
                    reorder.purchase_order_id = po.id
                    reorder.ordered_quantity = quantity
                    self._resolve(reorder)
                    self.ledger.mark_ordered(item, po.id)
                    reorders.append(reorder)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for reorder in reorders:
            self.db.refresh(reorder)
        message = f"Successfully created {len(purchases)} purchase order(s) for {len(items)} item(s)"
        logger.info(message)
        return {
            "reorders": reorders,
            "purchase_order_ids": [po.id for po in purchases],
            "message": message,
        }

    # Transitions

    def approve_reorder(self, reorder_id: int) -> Reorder:
        reorder = self.get_reorder(reorder_id)
        reorder.status = ensure_transition(reorder.status, ReorderStatus.APPROVED).value
        self._resolve(reorder)
        self.db.commit()
        self.db.refresh(reorder)

        self._notify(
            NotificationType.REORDER_APPROVED,
            "Reorder Approved",
            f"Reorder request approved for {reorder.stock_item.name}",
            reorder,
            {"reorderNumber": reorder.reorder_number, "itemName": reorder.stock_item.name,
             "approvedBy": self.current_user.name},
        )
        return reorder

    def create_purchase_from_reorder(self, reorder_id: int, data: Optional[PurchaseFromReorderRequest] = None) -> Reorder:
        data = data or PurchaseFromReorderRequest()
        reorder = self.get_reorder(reorder_id)
        if reorder.supplier is None:
            raise ValidationError("No supplier specified for this reorder", code="NO_SUPPLIER")
        ensure_transition(reorder.status, ReorderStatus.ORDERED)

        quantity = data.quantity or reorder.suggested_quantity
        item = reorder.stock_item
        try:
            po = self.purchasing.generate(
                reorder.supplier,
                [OrderLine(item=item, quantity=quantity)],
                notes=data.notes or f"Created from reorder request {reorder.reorder_number}",
                expected_delivery_date=data.expected_delivery_date,
            )
            reorder.status = ReorderStatus.ORDERED.value
            reorder.purchase_order_id = po.id
            reorder.ordered_quantity = quantity
            self._resolve(reorder)
            self.ledger.mark_ordered(item, po.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reorder)
        logger.info(f"Reorder {reorder.reorder_number} ordered on {po.purchase_number}")
        return reorder

    def cancel_reorder(self, reorder_id: int, notes: Optional[str] = None) -> Reorder:
        """Cancel from any state but received; cancelling twice is a no-op"""
        reorder = self.get_reorder(reorder_id)
        if reorder.status == ReorderStatus.CANCELLED.value:
            return reorder
        reorder.status = ensure_transition(reorder.status, ReorderStatus.CANCELLED).value
        self._resolve(reorder)
        if notes:
            reorder.notes = notes
        self.ledger.clear_reorder_state(reorder.stock_item)
        self.db.commit()
        self.db.refresh(reorder)
        logger.info(f"Reorder {reorder.reorder_number} cancelled by {self.current_user.name}")
        return reorder

    def mark_reorder_received(self, reorder_id: int, data: Optional[MarkReceivedRequest] = None) -> Reorder:
        data = data or MarkReceivedRequest()
        reorder = self.get_reorder(reorder_id)
        reorder.status = ensure_transition(reorder.status, ReorderStatus.RECEIVED).value
        reorder.received_quantity = (
            data.received_quantity if data.received_quantity is not None else reorder.ordered_quantity
        )
        if data.notes:
            reorder.notes = data.notes
        self._resolve(reorder)
        self.ledger.clear_reorder_state(reorder.stock_item, stamp=True)
        self.db.commit()
        self.db.refresh(reorder)
        return reorder

    def _notify(self, type: NotificationType, title: str, message: str, related, metadata: Dict,
                related_model: RelatedModel = RelatedModel.REORDER):
        try:
            NotificationSynchronizer(self.db).notify(
                type, title, message,
                related_id=related.id, related_model=related_model, metadata=metadata,
            )
        except Exception as e:
            logger.error(f"Failed to create {type.value} notification: {e}", exc_info=True)


@subscribe(PURCHASE_RECEIVED)
def resolve_reorders_for_purchase(db: Session, purchase_order: PurchaseOrder, actor: Optional[Actor] = None, **_) -> int:
    """
    Close the reorders a received purchase fulfils.

    Stock has already been incremented by the receipt itself; this only
    moves the reorders to received.
    """
    actor = actor or SYSTEM_ACTOR
    received_by_item = {line.stock_item_id: line.quantity for line in purchase_order.lines}
    reorders = db.query(Reorder).filter(
        Reorder.purchase_order_id == purchase_order.id,
        Reorder.status.in_(OPEN_STATUS_VALUES),
    ).all()

    for reorder in reorders:
        reorder.status = ensure_transition(reorder.status, ReorderStatus.RECEIVED).value
        reorder.received_quantity = received_by_item.get(reorder.stock_item_id, reorder.ordered_quantity)
        reorder.resolved_at = utcnow()
        reorder.resolved_by_id = actor.user_id
        reorder.resolved_by_name = actor.name
        logger.info(f"Reorder {reorder.reorder_number} received through {purchase_order.purchase_number}")
    return len(reorders)


@subscribe(PURCHASE_CANCELLED)
def cancel_reorders_for_purchase(db: Session, purchase_order: PurchaseOrder, actor: Optional[Actor] = None, **_) -> int:
    """Cancel the open reorders waiting on a purchase that was cancelled or deleted"""
    actor = actor or SYSTEM_ACTOR
    reorders = db.query(Reorder).filter(
        Reorder.purchase_order_id == purchase_order.id,
        Reorder.status.in_(OPEN_STATUS_VALUES),
    ).all()

    for reorder in reorders:
        reorder.status = ensure_transition(reorder.status, ReorderStatus.CANCELLED).value
        reorder.resolved_at = utcnow()
        reorder.resolved_by_id = actor.user_id
        reorder.resolved_by_name = actor.name
        logger.info(f"Reorder {reorder.reorder_number} cancelled with {purchase_order.purchase_number}")
    return len(reorders)
