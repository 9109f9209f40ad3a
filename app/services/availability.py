"""
Availability Calculator

Pure projections over a team's members and leave requests. Nothing here
touches the database: callers load members and requests, build a
calculator and read from it. Only approved requests of team members count.
"""
from collections import OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from app.models.leave_request import LeaveStatus

DEFAULT_CRITICAL_THRESHOLD = 0.5


def iter_days(start: date, end: date) -> Iterable[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def _status_value(status) -> str:
    return getattr(status, "value", status)


def _type_value(leave_type) -> str:
    return getattr(leave_type, "value", leave_type)


class AvailabilityCalculator:
    """
    Works on any objects exposing the User / LeaveRequest attributes
    (ORM rows, schemas or test doubles).
    """

    def __init__(self, team_members: Iterable[Any], requests: Iterable[Any], as_of_date: date, horizon_days: int = 30):
        self.members = list(team_members)
        self.member_ids = {m.id for m in self.members}
        self.as_of_date = as_of_date
        self.horizon_days = horizon_days
        # Stable order: start_date, then id
        self.approved = sorted(
            (
                r for r in requests
                if _status_value(r.status) == LeaveStatus.APPROVED.value and r.user_id in self.member_ids
            ),
            key=lambda r: (r.start_date, r.id),
        )

    def upcoming_absences(self, horizon_days: Optional[int] = None) -> List[Any]:
        """Approved requests intersecting [as_of, as_of + horizon], by start date."""
        horizon = self.horizon_days if horizon_days is None else horizon_days
        window_start = self.as_of_date
        window_end = self.as_of_date + timedelta(days=horizon)
        return [
            r for r in self.approved
            if r.start_date <= window_end and r.end_date >= window_start
        ]

    def absences_by_date(self) -> Dict[date, List[Any]]:
        """Each calendar date mapped to the approved requests covering it, ordered by date."""
        by_date: Dict[date, List[Any]] = {}
        for request in self.approved:
            for day in iter_days(request.start_date, request.end_date):
                by_date.setdefault(day, []).append(request)
        return OrderedDict(sorted(by_date.items()))

    @staticmethod
    def _one_per_member(requests: List[Any]) -> List[Any]:
        absentees = OrderedDict()
        for request in requests:
            absentees.setdefault(request.user_id, request)
        return list(absentees.values())

    def critical_days(self, threshold: float = DEFAULT_CRITICAL_THRESHOLD) -> List[Dict[str, Any]]:
        """
        Dates where the number of distinct absent members is strictly greater
        than threshold * team size.
        """
        team_size = len(self.members)
        if team_size == 0:
            return []

        critical = []
        for day, requests in self.absences_by_date().items():
            absentees = self._one_per_member(requests)
            if len(absentees) > threshold * team_size:
                critical.append({
                    "date": day,
                    "absent_count": len(absentees),
                    "ratio": len(absentees) / team_size,
                    "absentees": absentees,
                })
        return critical

    def conflicts(self) -> List[Dict[str, Any]]:
        """Dates on which more than one member is absent."""
        overlapping = []
        for day, requests in self.absences_by_date().items():
            absentees = self._one_per_member(requests)
            if len(absentees) > 1:
                overlapping.append({"date": day, "absentees": absentees})
        return overlapping

    def member_status(self, member_id: int, as_of_date: Optional[date] = None) -> Dict[str, Any]:
        day = as_of_date or self.as_of_date
        for request in self.approved:
            if request.user_id == member_id and request.start_date <= day <= request.end_date:
                return {
                    "user_id": member_id,
                    "status": "absent",
                    "reason": _type_value(request.leave_type),
                    "request_id": request.id,
                }
        return {"user_id": member_id, "status": "available", "reason": None, "request_id": None}

    def team_status(self, as_of_date: Optional[date] = None) -> List[Dict[str, Any]]:
        return [self.member_status(member.id, as_of_date) for member in self.members]

    def absent_count(self, as_of_date: Optional[date] = None) -> int:
        return sum(1 for status in self.team_status(as_of_date) if status["status"] == "absent")
