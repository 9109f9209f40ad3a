from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional
from app.models.leave_request import LeaveStatus, LeaveType

class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    # Inclusive day span when omitted
    days_count: Optional[int] = None
    reason: Optional[str] = None
    # Defaults to the caller; HR may file on behalf of someone else
    user_id: Optional[int] = None

class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_name: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_count: int
    reason: Optional[str] = None
    status: LeaveStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    created_at: Optional[datetime] = None

class LeaveReviewRequest(BaseModel):
    comments: Optional[str] = None

class LeaveRequestFilter(BaseModel):
    user_id: Optional[int] = None
    user_ids: Optional[list[int]] = None
    status: Optional[LeaveStatus] = None
    leave_type: Optional[LeaveType] = None
    # Requests whose [start_date, end_date] overlaps [start, end]
    start: Optional[date] = None
    end: Optional[date] = None

class LeaveTypeInfo(BaseModel):
    value: LeaveType
    label: str
    max_days: Optional[int] = None
    debits_balance: bool = False

# Resolve forward references for Pydantic V2
LeaveRequestResponse.model_rebuild()
