"""
Balance Ledger

Vacation and sick balances live on the user row. Only approved vacation
requests debit the ledger; every other leave type is balance-neutral.
Negative balances are allowed unless settings.leave.enforce_balance_floor
is switched on.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError
from app.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from app.models.user import User
from app.schemas.user import BalanceSummary
from app.services.base import BaseService

# Leave types that consume a ledger balance when approved
DEBITING_TYPES = {LeaveType.VACATION.value}


class BalanceLedger(BaseService):

    def __init__(self, db: Session, enforce_floor: Optional[bool] = None):
        super().__init__(db)
        self.enforce_floor = settings.leave.enforce_balance_floor if enforce_floor is None else enforce_floor

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def debit_vacation(self, user_id: int, days: int, commit: bool = True) -> int:
        """
        Subtract `days` from the user's vacation balance and return the new balance.
        Pass commit=False to take part in the caller's transaction.
        """
        if days <= 0:
            raise ValidationError("Debit must be a positive number of days", details={"days": days})

        user = self._get_user(user_id)
        new_balance = user.vacation_days_balance - days
        if self.enforce_floor and new_balance < 0:
            self.log_warning(f"Rejected vacation debit of {days} for user {user_id}: balance {user.vacation_days_balance}")
            raise InsufficientBalanceError(user_id, user.vacation_days_balance, days)

        user.vacation_days_balance = new_balance
        if commit:
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        else:
            self.db.flush()

        self.log_info(f"Debited {days} vacation day(s) from user {user_id}; balance now {new_balance}")
        return new_balance

    def pending_vacation_days(self, user_id: int) -> int:
        total = self.db.query(func.coalesce(func.sum(LeaveRequest.days_count), 0)).filter(
            LeaveRequest.user_id == user_id,
            LeaveRequest.leave_type == LeaveType.VACATION.value,
            LeaveRequest.status == LeaveStatus.PENDING.value,
        ).scalar()
        return int(total or 0)

    def summary(self, user_id: int) -> BalanceSummary:
        """Current balances plus what pending vacation requests would consume."""
        user = self._get_user(user_id)
        pending = self.pending_vacation_days(user_id)
        return BalanceSummary(
            user_id=user.id,
            vacation_days_balance=user.vacation_days_balance,
            sick_days_balance=user.sick_days_balance,
            pending_vacation_days=pending,
            available_vacation_days=user.vacation_days_balance - pending,
        )
