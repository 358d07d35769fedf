"""
Notification API endpoints - recent (layout bar) view

Deleting here dismisses: the archived copy is kept.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from biztrack.api import deps
from biztrack.core.security import Actor
from biztrack.schemas.common import BulkResult, CountResponse, MessageResponse
from biztrack.schemas.notification import Notification, RecentNotificationList
from biztrack.services.notifications.synchronizer import NotificationSynchronizer

router = APIRouter()


@router.get("/", response_model=RecentNotificationList)
def list_notifications(
    read: Optional[bool] = None,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    """
    The most recent notifications, capped, with the total and a has_more flag.
    """
    return NotificationSynchronizer(db).list_recent(read=read)


@router.get("/unread/count", response_model=CountResponse)
def get_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return {"count": NotificationSynchronizer(db).unread_count_recent()}


@router.patch("/read/all", response_model=BulkResult)
def mark_all_read(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    count = NotificationSynchronizer(db).mark_all_read_recent()
    return {"message": "All notifications marked as read", "updated_count": count}


@router.delete("/read/all", response_model=BulkResult)
def delete_all_read(
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    count = NotificationSynchronizer(db).delete_all_read_recent()
    return {"message": f"{count} read notification(s) dismissed", "deleted_count": count}


@router.get("/{notification_id}", response_model=Notification)
def get_notification(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return NotificationSynchronizer(db).get_recent(notification_id)


@router.patch("/{notification_id}/read", response_model=Notification)
def mark_read(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    return NotificationSynchronizer(db).mark_read_recent(notification_id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def dismiss_notification(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    current_user: Actor = Depends(deps.get_current_actor),
):
    NotificationSynchronizer(db).dismiss(notification_id)
    return {"message": "Notification dismissed"}
