"""
BizTrack Supplier Model
Supplier lookup used when resolving who a reorder is placed with
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin


class Supplier(TimestampMixin, Base):
    """Supplier master"""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, doc="Supplier name")
    email = Column(String(100), default='', doc="Email address")
    phone = Column(String(30), default='', doc="Phone number")
    contact_person = Column(String(100), default='', doc="Primary contact person")
    payment_terms = Column(String(10), default='net30', doc="immediate, net15, net30, net45, net60")
    average_lead_time_days = Column(Integer, default=7, doc="Average lead time in days")
    rating = Column(Integer, default=3, doc="Rating 1-5")
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text)

    items = relationship("StockItem", back_populates="preferred_supplier")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="valid_rating"),
        Index("idx_suppliers_name", "name"),
        Index("idx_suppliers_active", "is_active"),
    )

    def __repr__(self):
        return f"<Supplier {self.id} {self.name}>"
