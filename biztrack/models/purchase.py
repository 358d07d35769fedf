"""
BizTrack Purchase Models
Purchase orders, their lines and supplier payments
"""
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Text,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin, utcnow


class PurchaseOrder(TimestampMixin, Base):
    """
    Purchase Order header

    The supplier is denormalised at creation time. Receipt of a purchase
    order is the event that increments stock.
    """
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_number = Column(String(20), unique=True, nullable=False, doc="PO-NNNNNN")

    # Supplier snapshot
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_name = Column(String(100), nullable=False)
    supplier_email = Column(String(100), default='')
    supplier_phone = Column(String(30), default='')

    # Totals
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    shipping = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    # Payment
    payment_method = Column(String(20), nullable=False, default='cash')
    payment_status = Column(String(10), nullable=False, default='unpaid')
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(10), nullable=False, default='pending', doc="pending, received, cancelled")
    expected_delivery_date = Column(DateTime, nullable=True)
    received_at = Column(DateTime, nullable=True)
    notes = Column(Text)

    # Creator snapshot
    created_by_id = Column(String(40))
    created_by_name = Column(String(100))
    created_by_role = Column(String(20))

    lines = relationship(
        "PurchaseOrderLine", back_populates="purchase_order",
        cascade="all, delete-orphan", order_by="PurchaseOrderLine.id"
    )
    payments = relationship(
        "PurchasePayment", back_populates="purchase_order",
        cascade="all, delete-orphan", order_by="PurchasePayment.id"
    )

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'received', 'cancelled')", name="valid_status"),
        CheckConstraint("payment_status IN ('unpaid', 'partial', 'paid')", name="valid_payment_status"),
        Index("idx_purchase_orders_status", "status"),
    )

    @property
    def balance_due(self):
        return (self.total or 0) - (self.paid_amount or 0)

    def __repr__(self):
        return f"<PurchaseOrder {self.purchase_number} {self.status}>"


class PurchaseOrderLine(Base):
    """Purchase Order line"""
    __tablename__ = "purchase_order_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    stock_item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="RESTRICT"), nullable=True, index=True)
    name = Column(String(120), nullable=False)
    quantity = Column(Integer, nullable=False)
    cost = Column(Numeric(12, 2), nullable=False, doc="Unit cost")
    total = Column(Numeric(12, 2), nullable=False, doc="Line total")

    purchase_order = relationship("PurchaseOrder", back_populates="lines")
    stock_item = relationship("StockItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="positive_quantity"),
    )


class PurchasePayment(Base):
    """Payment made against a purchase order"""
    __tablename__ = "purchase_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(20), nullable=False, default='cash')
    paid_at = Column(DateTime, nullable=False, default=utcnow)
    notes = Column(Text)

    purchase_order = relationship("PurchaseOrder", back_populates="payments")
