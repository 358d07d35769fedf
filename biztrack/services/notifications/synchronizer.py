"""
Notification Synchronizer

One alert stream stored in two views sharing an identity:

- recent (``notifications``): what the layout bar shows, the newest
  RECENT_ALERT_LIMIT rows per query; deleting here is a dismiss.
- archive (``notification_archive``): every alert, paginated; deleting here
  removes the alert from both views.

Creation writes the recent row first and the archive row second, each in its
own commit with bounded retries. An archive write that still fails leaves a
recent row without its archive twin; ``sync_missing_to_archive`` backfills
those and runs before every archive read.
"""
from typing import Any, Dict, List, Optional, Type, Union
from uuid import uuid4
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from biztrack.core.config import settings
from biztrack.core.exceptions import NotFoundError
from biztrack.models.notification import Notification, NotificationArchive
from biztrack.models.stock import StockItem
from biztrack.schemas.common import Pagination, page_offset
from biztrack.schemas.notification import NotificationCreate, NotificationType, RelatedModel

logger = logging.getLogger(__name__)

STOCK_ALERT_TYPES = (NotificationType.LOW_STOCK.value, NotificationType.OUT_OF_STOCK.value)


class NotificationSynchronizer:
    """Keeps the recent and archive views of the alert stream consistent"""

    def __init__(self, db: Session):
        self.db = db

    # Creation

    def create_notification(self, data: NotificationCreate) -> Notification:
        """
        Write one alert to both views.

        Raises the storage error if the recent write fails on every attempt.
        An archive failure is logged and left for the sweep.
        """
        values = {
            "id": uuid4().hex,
            "type": data.type.value,
            "title": data.title,
            "message": data.message,
            "read": False,
            "related_id": data.related_id,
            "related_model": data.related_model.value if data.related_model else None,
            "details": dict(data.metadata),
        }

        recent = self._write(Notification, values)
        try:
            self._write(NotificationArchive, dict(values, created_at=recent.created_at))
        except SQLAlchemyError as e:
            logger.error(
                f"Archive write failed for notification {values['id']}; "
                f"it will be backfilled on the next archive read: {e}"
            )
        return recent

    def notify(
        self,
        type: Union[NotificationType, str],
        title: str,
        message: str,
        related_id: Any = None,
        related_model: Union[RelatedModel, str, None] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        return self.create_notification(NotificationCreate(
            type=type,
            title=title,
            message=message,
            related_id=str(related_id) if related_id is not None else None,
            related_model=related_model,
            metadata=metadata or {},
        ))

    def _write(self, model: Type, values: Dict[str, Any]):
        last_error = None
        for attempt in range(1, settings.NOTIFICATION_WRITE_ATTEMPTS + 1):
            try:
                existing = self.db.get(model, values["id"])
                if existing is not None:
                    return existing
                row = model(**values)
                self.db.add(row)
                self.db.commit()
                return row
            except SQLAlchemyError as e:
                self.db.rollback()
                last_error = e
                logger.warning(
                    f"{model.__tablename__} write for {values['id']} failed "
                    f"(attempt {attempt}/{settings.NOTIFICATION_WRITE_ATTEMPTS}): {e}"
                )
        raise last_error

    # Stock alerts

    def has_unread_alert(self, type: str, related_id: str) -> bool:
        return self.db.query(Notification.id).filter(
            Notification.type == type,
            Notification.related_id == related_id,
            Notification.read.is_(False),
        ).first() is not None

    def check_stock_alert(self, item: StockItem) -> Optional[Notification]:
        """
        Raise an out_of_stock or low_stock alert for the item if warranted.

        Suppressed while an unread alert of the same type for the same item
        exists in the recent view.
        """
        if item.quantity <= 0:
            alert_type = NotificationType.OUT_OF_STOCK
            title = "Item Out of Stock"
            message = f"{item.name} (SKU: {item.sku}) is out of stock. Please restock immediately."
        elif item.is_low_stock:
            alert_type = NotificationType.LOW_STOCK
            title = "Low Stock Alert"
            message = (
                f"{item.name} (SKU: {item.sku}) is running low. "
                f"Current stock: {item.quantity}, Reorder level: {item.reorder_level}."
            )
        else:
            return None

        if self.has_unread_alert(alert_type.value, str(item.id)):
            logger.info(f"{alert_type.value} alert for {item.sku} suppressed, unread alert exists")
            return None

        return self.notify(
            alert_type,
            title,
            message,
            related_id=item.id,
            related_model=RelatedModel.INVENTORY,
            metadata={
                "itemName": item.name,
                "sku": item.sku,
                "stock": item.quantity,
                "reorderLevel": item.reorder_level,
            },
        )

    def mark_item_alerts_read(self, item_id: int) -> int:
        """
        Mark unread stock alerts for an item read in both views.
        Joins the caller's transaction; the caller commits.
        """
        recent = self._unread_stock_alerts(Notification, str(item_id))
        archived = self._unread_stock_alerts(NotificationArchive, str(item_id))
        for row in recent + archived:
            row.read = True
        return len(recent)

    def _unread_stock_alerts(self, model: Type, related_id: str) -> List:
        return self.db.query(model).filter(
            model.type.in_(STOCK_ALERT_TYPES),
            model.related_id == related_id,
            model.read.is_(False),
        ).all()

    # Reconciliation

    def sync_missing_to_archive(self) -> int:
        """Backfill archive rows for recent alerts that lack one"""
        missing = self.db.query(Notification).outerjoin(
            NotificationArchive, NotificationArchive.id == Notification.id
        ).filter(NotificationArchive.id.is_(None)).all()

        if not missing:
            return 0

        for row in missing:
            self.db.add(NotificationArchive(
                id=row.id,
                type=row.type,
                title=row.title,
                message=row.message,
                read=row.read,
                related_id=row.related_id,
                related_model=row.related_model,
                details=dict(row.details or {}),
                created_at=row.created_at,
                updated_at=row.updated_at,
            ))
        self.db.commit()
        logger.info(f"Backfilled {len(missing)} notification(s) into the archive")
        return len(missing)

    # Recent view

    def list_recent(self, read: Optional[bool] = None) -> Dict[str, Any]:
        query = self.db.query(Notification)
        if read is not None:
            query = query.filter(Notification.read.is_(read))

        total = query.count()
        rows = query.order_by(Notification.created_at.desc()).limit(settings.RECENT_ALERT_LIMIT).all()
        return {"data": rows, "total": total, "has_more": total > settings.RECENT_ALERT_LIMIT}

    def get_recent(self, notification_id: str) -> Notification:
        row = self.db.get(Notification, notification_id)
        if not row:
            raise NotFoundError(f"Notification {notification_id} not found", code="NOTIFICATION_NOT_FOUND")
        return row

    def unread_count_recent(self) -> int:
        return self.db.query(Notification).filter(Notification.read.is_(False)).count()

    def mark_read_recent(self, notification_id: str) -> Notification:
        row = self.get_recent(notification_id)
        row.read = True
        archived = self.db.get(NotificationArchive, notification_id)
        if archived is not None:
            archived.read = True
        self.db.commit()
        return row

    def mark_all_read_recent(self) -> int:
        ids = [r.id for r in self.db.query(Notification.id).filter(Notification.read.is_(False))]
        self._set_read(ids)
        return len(ids)

    def dismiss(self, notification_id: str) -> None:
        """Remove from the layout bar; the archive copy stays"""
        row = self.get_recent(notification_id)
        self._dismiss(row)
        self.db.commit()

    def delete_all_read_recent(self) -> int:
        rows = self.db.query(Notification).filter(Notification.read.is_(True)).all()
        for row in rows:
            self._dismiss(row)
        self.db.commit()
        return len(rows)

    def _dismiss(self, row: Notification):
        archived = self.db.get(NotificationArchive, row.id)
        if archived is None:
            archived = self._archive_copy(row)
            self.db.add(archived)
        archived.dismissed_from_layout_bar = True
        self.db.delete(row)

    def _archive_copy(self, row: Notification) -> NotificationArchive:
        return NotificationArchive(
            id=row.id, type=row.type, title=row.title, message=row.message,
            read=row.read, related_id=row.related_id, related_model=row.related_model,
            details=dict(row.details or {}), created_at=row.created_at,
        )

    # Archive view

    def list_archive(self, read: Optional[bool] = None, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        self.sync_missing_to_archive()
        limit = limit or settings.ARCHIVE_PAGE_LIMIT

        query = self.db.query(NotificationArchive)
        if read is not None:
            query = query.filter(NotificationArchive.read.is_(read))

        total = query.count()
        rows = query.order_by(NotificationArchive.created_at.desc()).offset(page_offset(page, limit)).limit(limit).all()
        return {"data": rows, "pagination": Pagination.build(page, limit, total)}

    def get_archived(self, notification_id: str) -> NotificationArchive:
        self.sync_missing_to_archive()
        row = self.db.get(NotificationArchive, notification_id)
        if not row:
            raise NotFoundError(f"Notification {notification_id} not found", code="NOTIFICATION_NOT_FOUND")
        return row

    def unread_count_archive(self) -> int:
        self.sync_missing_to_archive()
        return self.db.query(NotificationArchive).filter(NotificationArchive.read.is_(False)).count()

    def mark_read_archive(self, notification_id: str) -> NotificationArchive:
        row = self.get_archived(notification_id)
        row.read = True
        recent = self.db.get(Notification, notification_id)
        if recent is not None:
            recent.read = True
        self.db.commit()
        return row

    def mark_all_read_archive(self) -> int:
        self.sync_missing_to_archive()
        ids = [r.id for r in self.db.query(NotificationArchive.id).filter(NotificationArchive.read.is_(False))]
        self._set_read(ids)
        return len(ids)

    def permanently_delete(self, notification_id: str) -> None:
        """Remove the alert from both views"""
        recent = self.db.get(Notification, notification_id)
        archived = self.db.get(NotificationArchive, notification_id)
        if recent is None and archived is None:
            raise NotFoundError(f"Notification {notification_id} not found", code="NOTIFICATION_NOT_FOUND")

        for row in (recent, archived):
            if row is not None:
                self.db.delete(row)
        self.db.commit()

    def delete_all_read_archive(self) -> int:
        self.sync_missing_to_archive()
        rows = self.db.query(NotificationArchive).filter(NotificationArchive.read.is_(True)).all()
        ids = [row.id for row in rows]
        for row in rows:
            self.db.delete(row)
        if ids:
            for recent in self.db.query(Notification).filter(Notification.id.in_(ids)).all():
                self.db.delete(recent)
        self.db.commit()
        return len(ids)

    def _set_read(self, ids: List[str]):
        if not ids:
            return
        for model in (Notification, NotificationArchive):
            self.db.execute(
                update(model)
                .where(model.id.in_(ids))
                .values(read=True)
                .execution_options(synchronize_session=False)
            )
        self.db.commit()
