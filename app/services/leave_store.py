"""
Leave Request Store

Owns the leave request lifecycle:
- create: always starts as pending
- set_status: pending -> approved | rejected, exactly once
- list / list_visible: filtered reads, newest first

Approving a vacation request debits the Balance Ledger inside the same
transaction, so the status change and the debit land together or not at all.
"""
from datetime import datetime, timezone
from typing import List, Optional, Set, Union

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.core.permissions import SessionContext
from app.models.leave_request import LeaveRequest, LeaveStatus, LeaveType, TERMINAL_STATUSES
from app.models.team import Team
from app.models.user import User, UserRole
from app.schemas.leave import LeaveRequestCreate, LeaveRequestFilter
from app.services.balance_ledger import BalanceLedger, DEBITING_TYPES
from app.services.base import BaseService
from app.services.notification import NotificationService


def inclusive_day_span(start_date, end_date) -> int:
    """Number of calendar days in [start_date, end_date]."""
    return (end_date - start_date).days + 1


class LeaveRequestStore(BaseService):

    def __init__(self, db: Session, ledger: Optional[BalanceLedger] = None):
        super().__init__(db)
        self.ledger = ledger or BalanceLedger(db)

    def get(self, request_id: int) -> LeaveRequest:
        leave = self.db.get(LeaveRequest, request_id)
        if not leave:
            raise NotFoundError("Leave request", request_id)
        return leave

    def create(self, ctx: SessionContext, data: LeaveRequestCreate) -> LeaveRequest:
        user_id = data.user_id or ctx.user_id
        if user_id != ctx.user_id:
            ctx.require("can_manage_users", "file leave requests for other users")

        try:
            leave_type = LeaveType(data.leave_type)
        except ValueError:
            raise ValidationError(f"Unknown leave type: {data.leave_type}", details={"leave_type": str(data.leave_type)})

        if data.end_date < data.start_date:
            raise ValidationError(
                "End date cannot be before start date",
                details={"start_date": str(data.start_date), "end_date": str(data.end_date)}
            )

        days_count = data.days_count
        if days_count is None:
            days_count = inclusive_day_span(data.start_date, data.end_date)
        if days_count <= 0:
            raise ValidationError("days_count must be greater than zero", details={"days_count": days_count})

        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)

        leave = LeaveRequest(
            user_id=user.id,
            user_name=user.name,
            leave_type=leave_type.value,
            start_date=data.start_date,
            end_date=data.end_date,
            days_count=days_count,
            reason=data.reason,
            status=LeaveStatus.PENDING.value,
        )
        with self.unit_of_work():
            self.db.add(leave)
        self.db.refresh(leave)

        self.log_info(
            f"Leave request {leave.id} created for user {user.id} ({leave_type.value}, {days_count} day(s))"
        )
        return leave

    def set_status(
        self,
        ctx: SessionContext,
        request_id: int,
        new_status: Union[LeaveStatus, str],
        comments: Optional[str] = None,
    ) -> LeaveRequest:
        ctx.require("can_review", "review leave requests")

        try:
            target = LeaveStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown status: {new_status}")
        if target not in TERMINAL_STATUSES:
            raise ValidationError(f"A leave request can only be set to approved or rejected, not {target.value}")

        leave = self.get(request_id)
        if leave.status != LeaveStatus.PENDING.value:
            self.log_warning(f"Rejected transition {leave.status} -> {target.value} for leave request {leave.id}")
            raise InvalidTransitionError(leave.id, leave.status, target.value)

        with self.unit_of_work():
            leave.status = target.value
            leave.reviewed_by = ctx.user_id
            leave.reviewed_at = datetime.now(timezone.utc)
            leave.review_comments = comments

            if target == LeaveStatus.APPROVED and leave.leave_type in DEBITING_TYPES:
                self.ledger.debit_vacation(leave.user_id, leave.days_count, commit=False)

            if target == LeaveStatus.APPROVED:
                NotificationService.create_notification(
                    self.db, leave.user_id, "Leave approved",
                    f"Your {leave.leave_type} request for {leave.days_count} day(s) has been approved.",
                    "success", related_type="leave_request", related_id=leave.id,
                )
            else:
                message = f"Your {leave.leave_type} request has been rejected."
                if comments:
                    message += f" Reason: {comments}"
                NotificationService.create_notification(
                    self.db, leave.user_id, "Leave rejected", message,
                    "error", related_type="leave_request", related_id=leave.id,
                )
        self.db.refresh(leave)

        self.log_info(f"Leave request {leave.id} {target.value} by user {ctx.user_id}")
        return leave

    def approve(self, ctx: SessionContext, request_id: int, comments: Optional[str] = None) -> LeaveRequest:
        return self.set_status(ctx, request_id, LeaveStatus.APPROVED, comments)

    def reject(self, ctx: SessionContext, request_id: int, comments: Optional[str] = None) -> LeaveRequest:
        return self.set_status(ctx, request_id, LeaveStatus.REJECTED, comments)

    def list(self, filters: Optional[LeaveRequestFilter] = None) -> List[LeaveRequest]:
        filters = filters or LeaveRequestFilter()
        query = self.db.query(LeaveRequest)
        if filters.user_id is not None:
            query = query.filter(LeaveRequest.user_id == filters.user_id)
        if filters.user_ids is not None:
            query = query.filter(LeaveRequest.user_id.in_(filters.user_ids))
        if filters.status is not None:
            query = query.filter(LeaveRequest.status == LeaveStatus(filters.status).value)
        if filters.leave_type is not None:
            query = query.filter(LeaveRequest.leave_type == LeaveType(filters.leave_type).value)
        # Overlap with [start, end]; either bound may be open
        if filters.end is not None:
            query = query.filter(LeaveRequest.start_date <= filters.end)
        if filters.start is not None:
            query = query.filter(LeaveRequest.end_date >= filters.start)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    def visible_user_ids(self, ctx: SessionContext) -> Optional[Set[int]]:
        """
        User ids whose requests the caller may see; None means everyone.

        - hr: everyone
        - manager: self plus members of the teams they manage
        - employee: self only
        """
        if ctx.role == UserRole.HR:
            return None
        visible = {ctx.user_id}
        if ctx.role == UserRole.MANAGER:
            members = self.db.query(User.id).join(Team, User.team_id == Team.id).filter(
                Team.manager_id == ctx.user_id
            ).all()
            visible.update(member_id for (member_id,) in members)
        return visible

    def list_visible(self, ctx: SessionContext, filters: Optional[LeaveRequestFilter] = None) -> List[LeaveRequest]:
        filters = filters or LeaveRequestFilter()
        visible = self.visible_user_ids(ctx)
        if visible is not None:
            allowed = visible if filters.user_ids is None else visible & set(filters.user_ids)
            filters = filters.model_copy(update={"user_ids": sorted(allowed)})
        return self.list(filters)
