"""
BizTrack Sales Models
Sales, their lines and customer payments
"""
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Text,
    ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin, utcnow


class Sale(TimestampMixin, Base):
    """Completed sale (bill)"""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_number = Column(String(20), unique=True, nullable=False, doc="SALE-NNNNNN")

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(100), default='')
    customer_phone = Column(String(30), default='')

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    payment_method = Column(String(20), nullable=False, default='cash')
    payment_status = Column(String(10), nullable=False, default='unpaid')
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(10), nullable=False, default='completed')
    notes = Column(Text)

    created_by_id = Column(String(40))
    created_by_name = Column(String(100))
    created_by_role = Column(String(20))

    lines = relationship("SaleLine", back_populates="sale", cascade="all, delete-orphan", order_by="SaleLine.id")
    payments = relationship("SalePayment", back_populates="sale", cascade="all, delete-orphan", order_by="SalePayment.id")

    __table_args__ = (
        CheckConstraint("payment_status IN ('unpaid', 'partial', 'paid')", name="valid_payment_status"),
    )

    @property
    def balance_due(self):
        return (self.total or 0) - (self.paid_amount or 0)


class SaleLine(Base):
    """Sale line; the quantities here feed the replenishment analytics"""
    __tablename__ = "sale_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    stock_item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="RESTRICT"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="lines")
    stock_item = relationship("StockItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="positive_quantity"),
    )


class SalePayment(Base):
    """Payment received against a sale"""
    __tablename__ = "sale_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(20), nullable=False, default='cash')
    paid_at = Column(DateTime, nullable=False, default=utcnow)
    notes = Column(Text)

    sale = relationship("Sale", back_populates="payments")
