from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from lms_api.core.config import MAX_PAGE_SIZE, NOTIFICATION_LIST_LIMIT
from lms_api.core.current_user import get_current_user
from lms_api.core.deps import get_db
from lms_api.models.notification import Notification
from lms_api.models.user import User
from lms_api.schemas.common import Message
from lms_api.schemas.notification import NotificationList, NotificationMarked

router = APIRouter()


def _own_notification_or_404(db: Session, notification_id: int, user: User) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == user.id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationList)
def list_notifications(
    limit: int = Query(NOTIFICATION_LIST_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    unread_only: bool = False,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    q = db.query(Notification).filter(Notification.recipient_id == me.id)
    if unread_only:
        q = q.filter(Notification.is_read.is_(False))

    items = q.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    unread_count = (
        db.query(func.count(Notification.id))
        .filter(Notification.recipient_id == me.id, Notification.is_read.is_(False))
        .scalar()
    ) or 0

    return {"notifications": items, "unread_count": unread_count}


@router.put("/read-all", response_model=Message)
def mark_all_read(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    (
        db.query(Notification)
        .filter(Notification.recipient_id == me.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read"}


@router.put("/{notification_id}/read", response_model=NotificationMarked)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    notification = _own_notification_or_404(db, notification_id, me)
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return {"message": "Notification marked as read", "notification": notification}


@router.delete("/{notification_id}", response_model=Message)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    notification = _own_notification_or_404(db, notification_id, me)
    db.delete(notification)
    db.commit()
    return {"message": "Notification deleted"}
