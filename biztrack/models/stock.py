"""
BizTrack Stock Models
SQLAlchemy model for the authoritative inventory record
"""
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Boolean,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin


class StockItem(TimestampMixin, Base):
    """
    Stock Item - Inventory master

    Quantity on hand, reorder thresholds and supplier linkage. Mutated by
    every sale, purchase receipt and reorder execution.
    """
    __tablename__ = "stock_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sku = Column(String(40), unique=True, nullable=False, doc="Stock keeping unit")
    name = Column(String(120), nullable=False, doc="Item name")
    category = Column(String(60), nullable=False, default='Other', doc="Item category")

    # Pricing
    price = Column(Numeric(12, 2), nullable=False, default=0, doc="Unit selling price")
    cost = Column(Numeric(12, 2), nullable=False, default=0, doc="Unit cost")
    last_purchase_price = Column(Numeric(12, 2), nullable=False, default=0, doc="Unit cost on the last purchase")

    # Quantities and replenishment parameters
    quantity = Column(Integer, nullable=False, default=0, doc="Quantity on hand")
    reorder_level = Column(Integer, nullable=False, default=15, doc="Reorder threshold")
    reorder_quantity = Column(Integer, nullable=False, default=10, doc="Reorder quantity hint")
    maximum_stock = Column(Integer, nullable=False, default=100, doc="Maximum stock")
    lead_time_days = Column(Integer, nullable=False, default=7, doc="Supplier lead time in days")
    safety_stock = Column(Integer, nullable=False, default=5, doc="Configured safety stock")

    # Supplier linkage
    preferred_supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier = Column(String(100), nullable=False, default='', doc="Supplier name as entered")
    location = Column(String(60), nullable=False, default='Warehouse')

    # Reorder state
    reorder_status = Column(String(10), nullable=False, default='none', doc="none, needed, pending, ordered")
    pending_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True)
    last_reorder_date = Column(DateTime, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    preferred_supplier = relationship("Supplier", back_populates="items")
    pending_order = relationship("PurchaseOrder", foreign_keys=[pending_order_id])
    reorders = relationship("Reorder", back_populates="stock_item")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="non_negative_quantity"),
        CheckConstraint(
            "reorder_status IN ('none', 'needed', 'pending', 'ordered')",
            name="valid_reorder_status"
        ),
        Index("idx_stock_items_category", "category"),
        Index("idx_stock_items_reorder_status", "reorder_status"),
    )

    @property
    def stock_value(self):
        return (self.price or 0) * (self.quantity or 0)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= 0 or self.quantity <= self.reorder_level

    def __repr__(self):
        return f"<StockItem {self.sku} qty={self.quantity}>"
