"""
Notification Synthesizer

Derives ephemeral notifications from the current requests and holidays.
Recomputed on every read and never persisted; ids are fixed strings so
clients can tell them apart from stored (integer id) notifications.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from app.core.permissions import SessionContext
from app.models.leave_request import LeaveStatus
from app.schemas.notification import NotificationResponse

PENDING_REQUESTS_ID = "pending-requests"
UPCOMING_HOLIDAYS_ID = "upcoming-holidays"
SYNTHETIC_IDS = {PENDING_REQUESTS_ID, UPCOMING_HOLIDAYS_ID}


def is_synthetic(notification_id: Any) -> bool:
    return str(notification_id) in SYNTHETIC_IDS


def upcoming_holidays(holidays: Iterable[Any], today: date, window_days: int = 7) -> List[Any]:
    """Holidays dated after today and at most window_days ahead."""
    window_end = today + timedelta(days=window_days)
    return [h for h in holidays if today < h.date <= window_end]


def synthesize_notifications(
    ctx: SessionContext,
    requests: Iterable[Any],
    holidays: Iterable[Any],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> List[NotificationResponse]:
    now = now or datetime.now(timezone.utc)
    notifications: List[NotificationResponse] = []

    if ctx.capabilities.can_review:
        pending = [r for r in requests if getattr(r.status, "value", r.status) == LeaveStatus.PENDING.value]
        if pending:
            notifications.append(NotificationResponse(
                id=PENDING_REQUESTS_ID,
                user_id=ctx.user_id,
                title="Pending requests",
                message=f"You have {len(pending)} request(s) awaiting review",
                type="warning",
                is_read=False,
                related_type="leave_request",
                created_at=now,
            ))

    upcoming = upcoming_holidays(holidays, now.date(), window_days)
    if upcoming:
        notifications.append(NotificationResponse(
            id=UPCOMING_HOLIDAYS_ID,
            user_id=ctx.user_id,
            title="Upcoming holidays",
            message=f"There are {len(upcoming)} holiday(s) in the next {window_days} days",
            type="info",
            is_read=False,
            related_type="holiday",
            created_at=now,
        ))

    return notifications
