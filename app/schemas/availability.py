from pydantic import BaseModel
import datetime as dt
from typing import Literal, Optional
from app.schemas.leave import LeaveRequestResponse

class MemberStatus(BaseModel):
    user_id: int
    status: Literal["absent", "available"]
    reason: Optional[str] = None
    request_id: Optional[int] = None

class CriticalDay(BaseModel):
    date: dt.date
    absent_count: int
    ratio: float
    absentees: list[LeaveRequestResponse]

class ConflictDay(BaseModel):
    date: dt.date
    absentees: list[LeaveRequestResponse]

class TeamAvailability(BaseModel):
    team_id: int
    as_of: dt.date
    horizon_days: int
    threshold: float
    members: list[MemberStatus]
    upcoming_absences: list[LeaveRequestResponse]
    critical_days: list[CriticalDay]
    conflicts: list[ConflictDay]
