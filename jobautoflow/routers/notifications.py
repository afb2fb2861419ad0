from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobautoflow.core.errors import NotFoundError
from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.models.user import User
from jobautoflow.repos.notification_repo import delete as delete_notification, list_for_user, mark_all_read, mark_read
from jobautoflow.schemas.notification import NotificationListResponse, NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = list_for_user(db, user.id, unread_only=unread_only, limit=limit, offset=offset)
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        total=total,
        unread_only=unread_only,
    )


@router.post("/read-all")
def read_all(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"updated": mark_all_read(db, user.id)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def read_one(
    notification_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notification = mark_read(db, notification_id, user.id)
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


@router.delete("/{notification_id}")
def remove(
    notification_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not delete_notification(db, notification_id, user.id):
        raise NotFoundError("Notification not found")
    return {"message": "Notification deleted"}
