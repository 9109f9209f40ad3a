from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.permissions import SessionContext
from app.database import get_db
from app.models.leave_request import LeaveStatus
from app.routers.auth_deps import get_session_context
from app.schemas.leave import LeaveRequestFilter
from app.schemas.notification import NotificationInbox, NotificationResponse
from app.services.holiday_registry import HolidayRegistry
from app.services.leave_store import LeaveRequestStore
from app.services.notification import NotificationService
from app.services.notification_synth import is_synthetic, synthesize_notifications

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationInbox)
def get_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Synthetic notifications first, then the stored inbox newest first."""
    now = datetime.now(timezone.utc)
    pending = LeaveRequestStore(db).list_visible(ctx, LeaveRequestFilter(status=LeaveStatus.PENDING))
    holidays = HolidayRegistry(db).list()
    synthetic = synthesize_notifications(
        ctx, pending, holidays, now=now, window_days=settings.leave.upcoming_holiday_window_days
    )

    stored = [
        NotificationResponse.model_validate(n)
        for n in NotificationService.list_for_user(db, ctx.user_id, unread_only=unread_only)
    ]
    notifications = synthetic + stored
    return NotificationInbox(
        notifications=notifications,
        unread_count=sum(1 for n in notifications if not n.is_read),
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_as_read(
    notification_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    if is_synthetic(notification_id):
        # Derived on every read; nothing to persist
        return NotificationResponse(
            id=notification_id,
            user_id=ctx.user_id,
            title="",
            message="",
            type="info",
            is_read=True,
        )

    if not notification_id.isdigit():
        raise HTTPException(status_code=404, detail="Notification not found")

    notification = NotificationService.mark_as_read(db, ctx.user_id, int(notification_id))
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.post("/mark-all-read")
def mark_all_notifications_as_read(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    updated = NotificationService.mark_all_as_read(db, ctx.user_id)
    return {"message": "All notifications marked as read", "updated": updated}
