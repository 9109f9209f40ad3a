"""
Reporting projections: dashboard counters, team stats and the monthly
absence grid. The monthly grid is a pure function over users and requests.
"""
import calendar
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.permissions import SessionContext
from app.models.holiday import Holiday
from app.models.leave_request import LeaveStatus, LeaveType
from app.models.user import User
from app.schemas.leave import LeaveRequestFilter
from app.schemas.report import DashboardStats, MonthlyReport, MonthlyReportRow
from app.schemas.team import TeamStats
from app.services.availability import AvailabilityCalculator
from app.services.base import BaseService
from app.services.leave_store import LeaveRequestStore

LEAVE_CODES = {
    LeaveType.VACATION.value: "V",
    LeaveType.SICK.value: "E",
    LeaveType.PERSONAL.value: "P",
    LeaveType.MATERNITY.value: "M",
    LeaveType.PATERNITY.value: "PT",
}


def _is_same_month(moment: Optional[datetime], today: date) -> bool:
    return moment is not None and moment.year == today.year and moment.month == today.month


def build_monthly_report(year: int, month: int, users: Iterable[Any], requests: Iterable[Any]) -> MonthlyReport:
    """One row per user: leave code for each day of the month and total days off within it."""
    days_in_month = calendar.monthrange(year, month)[1]
    month_start = date(year, month, 1)
    month_end = date(year, month, days_in_month)

    approved = sorted(
        (r for r in requests if getattr(r.status, "value", r.status) == LeaveStatus.APPROVED.value),
        key=lambda r: (r.start_date, r.id),
    )

    rows: List[MonthlyReportRow] = []
    for user in users:
        own = [r for r in approved if r.user_id == user.id and r.start_date <= month_end and r.end_date >= month_start]
        days: List[Optional[str]] = []
        for day_number in range(1, days_in_month + 1):
            day = date(year, month, day_number)
            code = None
            for request in own:
                if request.start_date <= day <= request.end_date:
                    code = LEAVE_CODES.get(getattr(request.leave_type, "value", request.leave_type), "X")
                    break
            days.append(code)

        total = 0
        for request in own:
            overlap_start = max(request.start_date, month_start)
            overlap_end = min(request.end_date, month_end)
            total += (overlap_end - overlap_start).days + 1

        rows.append(MonthlyReportRow(user_id=user.id, user_name=user.name, days=days, total_days_off=total))

    weekend_days = [
        d for d in range(1, days_in_month + 1)
        if date(year, month, d).weekday() >= 5
    ]
    return MonthlyReport(year=year, month=month, days_in_month=days_in_month, weekend_days=weekend_days, rows=rows)


class ReportService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.store = LeaveRequestStore(db)

    def dashboard_stats(self, ctx: SessionContext, today: Optional[date] = None) -> DashboardStats:
        today = today or datetime.now(timezone.utc).date()
        visible = self.store.list_visible(ctx)

        pending = sum(1 for r in visible if r.status == LeaveStatus.PENDING.value)
        approved_this_month = sum(
            1 for r in visible
            if r.status == LeaveStatus.APPROVED.value and _is_same_month(r.created_at, today)
        )

        members_out = 0
        viewer = self.db.get(User, ctx.user_id)
        if viewer and viewer.team_id is not None:
            members = self.db.query(User).filter(User.team_id == viewer.team_id).all()
            requests = self.store.list(LeaveRequestFilter(
                user_ids=[m.id for m in members], status=LeaveStatus.APPROVED, start=today, end=today
            ))
            members_out = AvailabilityCalculator(members, requests, today).absent_count()

        upcoming_holidays = self.db.query(Holiday).filter(Holiday.date > today).count()

        return DashboardStats(
            pending_requests=pending,
            approved_this_month=approved_this_month,
            team_members_out=members_out,
            upcoming_holidays=upcoming_holidays,
        )

    def team_stats(self, team_id: int, members: List[User], today: Optional[date] = None) -> TeamStats:
        today = today or datetime.now(timezone.utc).date()
        requests = self.store.list(LeaveRequestFilter(user_ids=[m.id for m in members]))
        absent = AvailabilityCalculator(members, requests, today).absent_count()
        return TeamStats(
            team_id=team_id,
            total_members=len(members),
            available_today=len(members) - absent,
            absent_today=absent,
            pending_requests=sum(1 for r in requests if r.status == LeaveStatus.PENDING.value),
            requests_this_month=sum(1 for r in requests if _is_same_month(r.created_at, today)),
        )

    def monthly_report(self, ctx: SessionContext, year: int, month: int) -> MonthlyReport:
        visible_ids = self.store.visible_user_ids(ctx)
        query = self.db.query(User)
        if visible_ids is not None:
            query = query.filter(User.id.in_(visible_ids))
        users = query.order_by(User.name.asc()).all()

        days_in_month = calendar.monthrange(year, month)[1]
        requests = self.store.list(LeaveRequestFilter(
            user_ids=[u.id for u in users],
            status=LeaveStatus.APPROVED,
            start=date(year, month, 1),
            end=date(year, month, days_in_month),
        ))
        return build_monthly_report(year, month, users, requests)
