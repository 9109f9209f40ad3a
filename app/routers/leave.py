from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError
from app.core.permissions import SessionContext
from app.database import get_db
from app.models.leave_request import LeaveStatus, LeaveType
from app.routers.auth_deps import get_session_context
from app.schemas.leave import (
    LeaveRequestCreate,
    LeaveRequestFilter,
    LeaveRequestResponse,
    LeaveReviewRequest,
    LeaveTypeInfo,
)
from app.schemas.report import MonthlyReport
from app.schemas.user import BalanceSummary
from app.services.balance_ledger import BalanceLedger, DEBITING_TYPES
from app.services.leave_store import LeaveRequestStore
from app.services.report import ReportService

router = APIRouter(
    prefix="/leave",
    tags=["Leave"]
)

LEAVE_TYPES = [
    LeaveTypeInfo(value=LeaveType.VACATION, label="Vacation", max_days=30),
    LeaveTypeInfo(value=LeaveType.SICK, label="Sick leave"),
    LeaveTypeInfo(value=LeaveType.PERSONAL, label="Personal matter", max_days=3),
    LeaveTypeInfo(value=LeaveType.MATERNITY, label="Maternity leave"),
    LeaveTypeInfo(value=LeaveType.PATERNITY, label="Paternity leave"),
]


@router.get("/types", response_model=List[LeaveTypeInfo])
def list_leave_types():
    return [
        info.model_copy(update={"debits_balance": info.value.value in DEBITING_TYPES})
        for info in LEAVE_TYPES
    ]


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    data: LeaveRequestCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return LeaveRequestStore(db).create(ctx, data)


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    user_id: Optional[int] = None,
    status: Optional[LeaveStatus] = None,
    leave_type: Optional[LeaveType] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    filters = LeaveRequestFilter(user_id=user_id, status=status, leave_type=leave_type, start=start, end=end)
    return LeaveRequestStore(db).list_visible(ctx, filters)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    store = LeaveRequestStore(db)
    leave = store.get(request_id)
    visible = store.visible_user_ids(ctx)
    if visible is not None and leave.user_id not in visible:
        raise AccessDeniedError("You cannot view this leave request")
    return leave


@router.put("/requests/{request_id}/approve", response_model=LeaveRequestResponse)
def approve_request(
    request_id: int,
    review: Optional[LeaveReviewRequest] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    comments = review.comments if review else None
    return LeaveRequestStore(db).approve(ctx, request_id, comments)


@router.put("/requests/{request_id}/reject", response_model=LeaveRequestResponse)
def reject_request(
    request_id: int,
    review: Optional[LeaveReviewRequest] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    comments = review.comments if review else None
    return LeaveRequestStore(db).reject(ctx, request_id, comments)


@router.get("/balance", response_model=BalanceSummary)
def get_my_balance(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return BalanceLedger(db).summary(ctx.user_id)


@router.get("/report/monthly", response_model=MonthlyReport)
def get_monthly_report(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return ReportService(db).monthly_report(ctx, year, month)
