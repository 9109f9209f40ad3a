from pydantic import BaseModel
from typing import Optional

class DashboardStats(BaseModel):
    pending_requests: int
    approved_this_month: int
    team_members_out: int
    upcoming_holidays: int

class MonthlyReportRow(BaseModel):
    user_id: int
    user_name: str
    # One entry per day of month: leave code ("V", "E", ...) or None
    days: list[Optional[str]]
    total_days_off: int

class MonthlyReport(BaseModel):
    year: int
    month: int
    days_in_month: int
    weekend_days: list[int]
    rows: list[MonthlyReportRow]
