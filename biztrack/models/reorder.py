"""
BizTrack Reorder Model
Replenishment requests and their lifecycle state
"""
from sqlalchemy import (
    Column, String, Integer, DateTime, Text,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin, utcnow


class Reorder(TimestampMixin, Base):
    """
    Reorder request

    Terminal states are received and cancelled; transitions are validated by
    biztrack.services.reorder.state_machine.
    """
    __tablename__ = "reorders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reorder_number = Column(String(20), unique=True, nullable=False, doc="RO-NNNNNN")

    stock_item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="RESTRICT"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)

    # Trigger snapshot
    trigger_type = Column(String(15), nullable=False, doc="auto, manual, out_of_stock")
    triggered_at = Column(DateTime, nullable=False, default=utcnow)
    triggered_by_id = Column(String(40))
    triggered_by_name = Column(String(100))
    triggered_by_role = Column(String(20))
    stock_at_trigger = Column(Integer, nullable=False)
    reorder_level = Column(Integer, nullable=False)
    suggested_quantity = Column(Integer, nullable=False)

    status = Column(String(10), nullable=False, default='pending')
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True)
    ordered_quantity = Column(Integer, nullable=True)
    received_quantity = Column(Integer, nullable=True)

    resolved_at = Column(DateTime, nullable=True)
    resolved_by_id = Column(String(40))
    resolved_by_name = Column(String(100))
    notes = Column(Text)

    stock_item = relationship("StockItem", back_populates="reorders")
    supplier = relationship("Supplier")
    purchase_order = relationship("PurchaseOrder")

    __table_args__ = (
        CheckConstraint("trigger_type IN ('auto', 'manual', 'out_of_stock')", name="valid_trigger_type"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'ordered', 'received', 'cancelled')",
            name="valid_status"
        ),
        Index("idx_reorders_stock_item", "stock_item_id"),
        Index("idx_reorders_supplier", "supplier_id"),
        Index("idx_reorders_status", "status"),
        Index("idx_reorders_purchase_order", "purchase_order_id"),
    )

    def __repr__(self):
        return f"<Reorder {self.reorder_number} {self.status}>"
