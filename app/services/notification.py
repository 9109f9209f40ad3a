from typing import List, Optional
from sqlalchemy.orm import Session
from app.models.notification import Notification

class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: str = "info",
        related_type: Optional[str] = None,
        related_id: Optional[int] = None,
    ) -> Notification:
        """
        Internal utility for creating stored notifications.
        Flushes only: the caller's transaction decides whether it is kept.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_type=related_type,
            related_id=related_id,
        )
        db.add(notification)
        db.flush()
        return notification

    @staticmethod
    def list_for_user(db: Session, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    @staticmethod
    def mark_as_read(db: Session, user_id: int, notification_id: int) -> Optional[Notification]:
        notification = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()
        if not notification:
            return None
        notification.is_read = True
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        ).update({Notification.is_read: True}, synchronize_session=False)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        return updated
