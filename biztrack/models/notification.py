"""
BizTrack Notification Models

The same alert stream is stored twice under one identity:
notifications (the bounded "recent" layout-bar view) and
notification_archive (the permanent view on the settings page).
"""
from sqlalchemy import Column, String, Boolean, Text, JSON, Index

from biztrack.core.database import Base
from biztrack.models.mixins import TimestampMixin


NOTIFICATION_TYPES = (
    "purchase", "sale", "low_stock", "out_of_stock", "system",
    "payment_received", "payment_made", "reorder_needed", "reorder_created",
    "reorder_approved", "auto_reorder", "low_stock_purchase", "login_failed",
    "login_success", "security_change", "expiring_soon", "expired",
)

RELATED_MODELS = ("Purchase", "Sale", "Inventory", "User", "Reorder", "Supplier")


class NotificationColumns(TimestampMixin):
    """Columns shared by both views"""

    id = Column(String(32), primary_key=True, doc="Identity shared by both views")
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    related_id = Column(String(40), nullable=True)
    related_model = Column(String(20), nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=False, default=dict)


class Notification(NotificationColumns, Base):
    """Recent alert shown in the layout bar; deleting it is a dismiss"""
    __tablename__ = "notifications"

    __table_args__ = (
        Index("idx_notifications_read_created", "read", "created_at"),
        Index("idx_notifications_type_related", "type", "related_id"),
    )

    def __repr__(self):
        return f"<Notification {self.id} {self.type}>"


class NotificationArchive(NotificationColumns, Base):
    """Archived alert; only removed by a permanent delete"""
    __tablename__ = "notification_archive"

    dismissed_from_layout_bar = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_notification_archive_read_created", "read", "created_at"),
    )

    def __repr__(self):
        return f"<NotificationArchive {self.id} {self.type}>"
