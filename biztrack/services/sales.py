"""
Sales Service
Sale primitives that feed the stock ledger and the replenishment analytics
"""
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session
import logging

from biztrack.core.exceptions import NotFoundError, ValidationError
from biztrack.core.security import Actor, SYSTEM_ACTOR
from biztrack.models.sales import Sale, SaleLine, SalePayment
from biztrack.models.stock import StockItem
from biztrack.schemas.notification import NotificationType, RelatedModel
from biztrack.schemas.purchase import PaymentCreate
from biztrack.schemas.sales import SaleCreate
from biztrack.services.notifications.synchronizer import NotificationSynchronizer
from biztrack.services.purchasing.purchase_orders import payment_status_for, MONEY
from biztrack.services.sequence import SequenceService
from biztrack.services.stock.reconciliation import StockReconciliationService

logger = logging.getLogger(__name__)


class SalesService:
    def __init__(self, db: Session, current_user: Optional[Actor] = None):
        self.db = db
        self.current_user = current_user or SYSTEM_ACTOR
        self.reconciliation = StockReconciliationService(db)

    def get_sale(self, sale_id: int) -> Sale:
        sale = self.db.get(Sale, sale_id)
        if not sale:
            raise NotFoundError(f"Sale {sale_id} not found", code="SALE_NOT_FOUND")
        return sale

    def create_sale(self, data: SaleCreate) -> Sale:
        """
        Record a sale.

        Every line is checked before any stock moves; one short line rejects
        the whole sale with the full list of offending lines.
        """
        try:
            item_ids = self.reconciliation.apply_sale(data.lines)

            sale = Sale(
                invoice_number=SequenceService(self.db).next_sale_number(),
                customer_name=data.customer_name,
                customer_email=data.customer_email or '',
                customer_phone=data.customer_phone or '',
                payment_method=data.payment_method,
                notes=data.notes,
                created_by_id=self.current_user.user_id,
                created_by_name=self.current_user.name,
                created_by_role=self.current_user.role,
            )
            subtotal = Decimal("0")
            for line in data.lines:
                item = self.db.get(StockItem, line.stock_item_id)
                price = Decimal(str(line.price if line.price is not None else item.price))
                total = (price * line.quantity).quantize(MONEY)
                sale.lines.append(SaleLine(
                    stock_item_id=item.id, name=item.name, quantity=line.quantity, price=price, total=total,
                ))
                subtotal += total

            sale.subtotal = subtotal
            sale.tax = data.tax
            sale.discount = data.discount
            sale.total = subtotal + data.tax - data.discount
            if sale.total < 0:
                raise ValidationError("Discount exceeds the sale amount", code="INVALID_DISCOUNT")
            if data.paid_amount > sale.total:
                raise ValidationError("Paid amount exceeds the sale total", code="PAYMENT_EXCEEDS_BALANCE")
            sale.paid_amount = data.paid_amount
            sale.payment_status = payment_status_for(data.paid_amount, sale.total)
            if data.paid_amount > 0:
                sale.payments.append(SalePayment(amount=data.paid_amount, method=data.payment_method))

            self.db.add(sale)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(sale)
        logger.info(f"Sale {sale.invoice_number} recorded, total {sale.total}")

        self._notify(
            NotificationType.SALE,
            "New Sale",
            f"Sale {sale.invoice_number} completed for {sale.customer_name}. Total: {sale.total}",
            sale,
            {"invoiceNumber": sale.invoice_number, "customer": sale.customer_name, "total": float(sale.total)},
        )
        self.reconciliation.evaluate_stock_alerts(item_ids)
        return sale

    def delete_sale(self, sale_id: int) -> bool:
        """Delete a sale and put its quantities back on stock"""
        sale = self.get_sale(sale_id)
        number = sale.invoice_number
        try:
            self.reconciliation.reverse_sale(sale.lines)
            self.db.delete(sale)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Sale {number} deleted and stock restored")
        return True

    def record_payment(self, sale_id: int, data: PaymentCreate) -> Sale:
        sale = self.get_sale(sale_id)
        amount = Decimal(str(data.amount))
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero", code="INVALID_AMOUNT")
        if amount > sale.balance_due:
            raise ValidationError(
                f"Payment of {amount} exceeds the balance due of {sale.balance_due}",
                code="PAYMENT_EXCEEDS_BALANCE",
                details={"balance_due": str(sale.balance_due)},
            )

        sale.payments.append(SalePayment(amount=amount, method=data.method, notes=data.notes))
        sale.paid_amount = (sale.paid_amount or 0) + amount
        sale.payment_status = payment_status_for(sale.paid_amount, sale.total)
        self.db.commit()
        self.db.refresh(sale)

        self._notify(
            NotificationType.PAYMENT_RECEIVED,
            "Payment Received",
            f"Payment of {amount} received for sale {sale.invoice_number} from {sale.customer_name}",
            sale,
            {"invoiceNumber": sale.invoice_number, "amount": float(amount), "balanceDue": float(sale.balance_due)},
        )
        return sale

    def _notify(self, type: NotificationType, title: str, message: str, sale: Sale, metadata: dict):
        try:
            NotificationSynchronizer(self.db).notify(
                type, title, message, related_id=sale.id, related_model=RelatedModel.SALE, metadata=metadata,
            )
        except Exception as e:
            logger.error(f"Failed to create {type.value} notification for {sale.invoice_number}: {e}", exc_info=True)
