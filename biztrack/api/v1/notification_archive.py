"""
Notification API endpoints - archive view

Deleting here is permanent and removes the alert from both views.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.config import settings
from biztrack.core.security import Actor
from biztrack.schemas.common import BulkResult, CountResponse, MessageResponse
from biztrack.schemas.notification import ArchivedNotification, ArchivedNotificationList
from biztrack.services.notifications.synchronizer import NotificationSynchronizer

router = APIRouter()


@router.get("/", response_model=ArchivedNotificationList)
def list_archived_notifications(
    read: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ARCHIVE_PAGE_LIMIT, ge=1, le=500),
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return NotificationSynchronizer(db).list_archive(read=read, page=page, limit=limit)


@router.get("/unread/count", response_model=CountResponse)
def get_archive_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return {"count": NotificationSynchronizer(db).unread_count_archive()}


@router.patch("/read/all", response_model=BulkResult)
def mark_all_archived_read(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    count = NotificationSynchronizer(db).mark_all_read_archive()
    return {"message": "All notifications marked as read", "updated_count": count}


@router.delete("/read/all", response_model=BulkResult)
def delete_all_archived_read(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    count = NotificationSynchronizer(db).delete_all_read_archive()
    return {"message": f"{count} read notification(s) permanently deleted", "deleted_count": count}


@router.get("/{notification_id}", response_model=ArchivedNotification)
def get_archived_notification(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return NotificationSynchronizer(db).get_archived(notification_id)


@router.patch("/{notification_id}/read", response_model=ArchivedNotification)
def mark_archived_read(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return NotificationSynchronizer(db).mark_read_archive(notification_id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_archived_notification(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    NotificationSynchronizer(db).permanently_delete(notification_id)
    return {"message": "Notification permanently deleted"}
