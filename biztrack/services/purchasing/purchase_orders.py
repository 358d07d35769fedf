"""
Purchase Order Service
Materialises purchase orders from reorders and exposes the purchase
primitives (create, status change, delete, payment) the engine consumes
"""
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
import logging

from biztrack.core.exceptions import NotFoundError, ValidationError, ConflictError
from biztrack.core.security import Actor, SYSTEM_ACTOR
from biztrack.models.mixins import utcnow
from biztrack.models.purchase import PurchaseOrder, PurchaseOrderLine, PurchasePayment
from biztrack.models.reorder import Reorder
from biztrack.models.stock import StockItem
from biztrack.models.supplier import Supplier
from biztrack.schemas.notification import NotificationType, RelatedModel
from biztrack.schemas.purchase import PurchaseCreate, PurchaseStatus, PaymentCreate, PaymentStatus
from biztrack.services.events import event_bus, PURCHASE_RECEIVED, PURCHASE_CANCELLED
from biztrack.services.notifications.synchronizer import NotificationSynchronizer
from biztrack.services.sequence import SequenceService
from biztrack.services.stock.reconciliation import StockReconciliationService
from biztrack.services.stock.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)

UNKNOWN_SUPPLIER = "Unknown Supplier"
MONEY = Decimal("0.01")


@dataclass
class OrderLine:
    """One item to put on a generated purchase order"""
    item: StockItem
    quantity: int
    cost: Optional[Decimal] = None


def unit_cost(item: StockItem) -> Decimal:
    """Last purchase price when known, otherwise the item cost"""
    return Decimal(str(item.last_purchase_price or item.cost or 0))


def payment_status_for(paid: Decimal, total: Decimal) -> str:
    if paid <= 0:
        return PaymentStatus.UNPAID.value
    if paid >= total:
        return PaymentStatus.PAID.value
    return PaymentStatus.PARTIAL.value


class PurchaseOrderService:
    """
    Purchase Order generation

    Generation methods add and flush but never commit so they can be part of
    a larger reorder operation; the primitives commit.
    """

    def __init__(self, db: Session, current_user: Optional[Actor] = None):
        self.db = db
        self.current_user = current_user or SYSTEM_ACTOR
        self.sequence = SequenceService(db)
        self.ledger = StockLedgerService(db)
        self.reconciliation = StockReconciliationService(db)

    # Generation

    def generate(
        self,
        supplier: Optional[Supplier],
        lines: Sequence[OrderLine],
        status: PurchaseStatus = PurchaseStatus.PENDING,
        notes: Optional[str] = None,
        expected_delivery_date: Optional[datetime] = None,
        supplier_name: Optional[str] = None,
        tax: Decimal = Decimal("0"),
        shipping: Decimal = Decimal("0"),
        payment_method: str = "cash",
    ) -> PurchaseOrder:
        """Build a purchase order with a snapshot of the supplier"""
        if not lines:
            raise ValidationError("A purchase order needs at least one line", code="EMPTY_PURCHASE")

        po = PurchaseOrder(
            purchase_number=self.sequence.next_purchase_number(),
            supplier_id=supplier.id if supplier else None,
            supplier_name=supplier.name if supplier else (supplier_name or UNKNOWN_SUPPLIER),
            supplier_email=(supplier.email or '') if supplier else '',
            supplier_phone=(supplier.phone or '') if supplier else '',
            status=PurchaseStatus(status).value,
            expected_delivery_date=expected_delivery_date,
            notes=notes,
            payment_method=payment_method,
            created_by_id=self.current_user.user_id,
            created_by_name=self.current_user.name,
            created_by_role=self.current_user.role,
        )

        subtotal = Decimal("0")
        for line in lines:
            cost = Decimal(str(line.cost)) if line.cost is not None else unit_cost(line.item)
            total = (cost * line.quantity).quantize(MONEY)
            po.lines.append(PurchaseOrderLine(
                stock_item_id=line.item.id,
                name=line.item.name,
                quantity=line.quantity,
                cost=cost,
                total=total,
            ))
            subtotal += total

        po.subtotal = subtotal
        po.tax = Decimal(str(tax))
        po.shipping = Decimal(str(shipping))
        po.total = subtotal + po.tax + po.shipping
        po.paid_amount = Decimal("0")
        po.payment_status = PaymentStatus.UNPAID.value
        if po.status == PurchaseStatus.RECEIVED.value:
            po.received_at = utcnow()

        self.db.add(po)
        self.db.flush()
        logger.info(f"Purchase order {po.purchase_number} generated for {po.supplier_name} ({len(lines)} line(s))")
        return po

    @staticmethod
    def group_by_supplier(entries: Sequence[tuple]) -> "OrderedDict[int, List[tuple]]":
        """Group (supplier, ...) tuples by supplier id keeping first-seen order"""
        groups: "OrderedDict[int, List[tuple]]" = OrderedDict()
        for entry in entries:
            groups.setdefault(entry[0].id, []).append(entry)
        return groups

    # Primitives

    def get_purchase(self, purchase_id: int) -> PurchaseOrder:
        po = self.db.get(PurchaseOrder, purchase_id)
        if not po:
            raise NotFoundError(f"Purchase order {purchase_id} not found", code="PURCHASE_NOT_FOUND")
        return po

    def create_purchase(self, data: PurchaseCreate) -> PurchaseOrder:
        supplier = self.ledger.get_supplier(data.supplier_id) if data.supplier_id else None
        lines = [
            OrderLine(item=self.ledger.get_item(line.stock_item_id), quantity=line.quantity, cost=line.cost)
            for line in data.lines
        ]

        try:
            po = self.generate(
                supplier,
                lines,
                status=PurchaseStatus.PENDING,
                notes=data.notes,
                expected_delivery_date=data.expected_delivery_date,
                supplier_name=data.supplier_name,
                tax=data.tax,
                shipping=data.shipping,
                payment_method=data.payment_method,
            )
            if data.status == PurchaseStatus.RECEIVED:
                self._receive(po)
            elif data.status == PurchaseStatus.CANCELLED:
                po.status = PurchaseStatus.CANCELLED.value
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(po)
        self._notify(
            NotificationType.PURCHASE,
            "New Purchase Order",
            f"Purchase order {po.purchase_number} created for {po.supplier_name}. Total: {po.total}",
            po,
            {"purchaseNumber": po.purchase_number, "supplier": po.supplier_name, "total": float(po.total)},
        )
        return po

    def update_status(self, purchase_id: int, status: PurchaseStatus) -> PurchaseOrder:
        """
        Change purchase status.

        pending -> received applies the receipt to stock and publishes
        purchase.received; received -> cancelled reverses the receipt and
        re-checks stock alerts. Cancelling publishes purchase.cancelled.
        """
        po = self.get_purchase(purchase_id)
        current, target = PurchaseStatus(po.status), PurchaseStatus(status)
        if current == target:
            return po
        if current == PurchaseStatus.CANCELLED or (
            current == PurchaseStatus.RECEIVED and target == PurchaseStatus.PENDING
        ):
            raise ConflictError(
                f"Cannot change purchase {po.purchase_number} from {current.value} to {target.value}",
                code="INVALID_TRANSITION",
            )

        reversed_ids = []
        try:
            if target == PurchaseStatus.RECEIVED:
                self._receive(po)
            else:
                if current == PurchaseStatus.RECEIVED:
                    reversed_ids = self.reconciliation.reverse_purchase_receipt(po.lines)
                    po.received_at = None
                po.status = target.value
                self._release_items(po)
                if target == PurchaseStatus.CANCELLED:
                    event_bus.publish(PURCHASE_CANCELLED, self.db, purchase_order=po, actor=self.current_user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(po)
        logger.info(f"Purchase order {po.purchase_number} moved from {current.value} to {target.value}")
        self.reconciliation.evaluate_stock_alerts(reversed_ids)
        return po

    def _receive(self, po: PurchaseOrder):
        """Apply the receipt to stock and let subscribers resolve what it fulfils"""
        self.reconciliation.apply_purchase_receipt(po.lines)
        po.status = PurchaseStatus.RECEIVED.value
        po.received_at = utcnow()
        self._release_items(po, stamp=True)
        event_bus.publish(PURCHASE_RECEIVED, self.db, purchase_order=po, actor=self.current_user)

    def _release_items(self, po: PurchaseOrder, stamp: bool = False):
        """Clear the pending-order link on items waiting on this purchase"""
        items = self.db.query(StockItem).filter(StockItem.pending_order_id == po.id).all()
        for item in items:
            self.ledger.clear_reorder_state(item, stamp=stamp)

    def delete_purchase(self, purchase_id: int) -> bool:
        """
        Delete a purchase; a received purchase takes its stock back out.
        Open reorders waiting on it are cancelled through purchase.cancelled.
        """
        po = self.get_purchase(purchase_id)
        number = po.purchase_number
        reversed_ids = []
        try:
            if po.status == PurchaseStatus.RECEIVED.value:
                reversed_ids = self.reconciliation.reverse_purchase_receipt(po.lines)
            self._release_items(po)
            event_bus.publish(PURCHASE_CANCELLED, self.db, purchase_order=po, actor=self.current_user)
            for reorder in self.db.query(Reorder).filter(Reorder.purchase_order_id == po.id):
                reorder.purchase_order_id = None
            self.db.delete(po)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Purchase order {number} deleted")
        self.reconciliation.evaluate_stock_alerts(reversed_ids)
        return True

    def record_payment(self, purchase_id: int, data: PaymentCreate) -> PurchaseOrder:
        po = self.get_purchase(purchase_id)
        amount = Decimal(str(data.amount))
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero", code="INVALID_AMOUNT")
        if amount > po.balance_due:
            raise ValidationError(
                f"Payment of {amount} exceeds the balance due of {po.balance_due}",
                code="PAYMENT_EXCEEDS_BALANCE",
                details={"balance_due": str(po.balance_due)},
            )

        po.payments.append(PurchasePayment(amount=amount, method=data.method, notes=data.notes))
        po.paid_amount = (po.paid_amount or 0) + amount
        po.payment_status = payment_status_for(po.paid_amount, po.total)
        self.db.commit()
        self.db.refresh(po)

        self._notify(
            NotificationType.PAYMENT_MADE,
            "Payment Made",
            f"Payment of {amount} made for purchase {po.purchase_number} to {po.supplier_name}",
            po,
            {"purchaseNumber": po.purchase_number, "amount": float(amount), "balanceDue": float(po.balance_due)},
        )
        return po

    def _notify(self, type: NotificationType, title: str, message: str, po: PurchaseOrder, metadata: Dict):
        try:
            NotificationSynchronizer(self.db).notify(
                type, title, message,
                related_id=po.id, related_model=RelatedModel.PURCHASE, metadata=metadata,
            )
        except Exception as e:
            logger.error(f"Failed to create {type.value} notification for {po.purchase_number}: {e}", exc_info=True)
