from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.permissions import SessionContext
from app.database import get_db
from app.models.leave_request import LeaveStatus
from app.routers.auth_deps import get_session_context
from app.schemas.availability import ConflictDay, CriticalDay, MemberStatus, TeamAvailability
from app.schemas.leave import LeaveRequestFilter, LeaveRequestResponse
from app.schemas.team import TeamCreate, TeamResponse, TeamStats, TeamUpdate
from app.schemas.user import UserResponse
from app.services.availability import AvailabilityCalculator
from app.services.directory import DirectoryService
from app.services.leave_store import LeaveRequestStore
from app.services.report import ReportService

router = APIRouter(prefix="/teams", tags=["Teams"])


def _team_response(directory: DirectoryService, team) -> TeamResponse:
    response = TeamResponse.model_validate(team)
    response.member_count = directory.member_count(team.id)
    return response


@router.get("/", response_model=List[TeamResponse])
def list_teams(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    return [_team_response(directory, team) for team in directory.list_teams()]


@router.post("/", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(
    data: TeamCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    return _team_response(directory, directory.create_team(ctx, data))


@router.get("/{team_id}", response_model=TeamResponse)
def get_team(
    team_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    team = directory.get_team(team_id)
    directory.ensure_team_access(ctx, team)
    return _team_response(directory, team)


@router.patch("/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: int,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    return _team_response(directory, directory.update_team(ctx, team_id, data))


@router.delete("/{team_id}")
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    detached = DirectoryService(db).delete_team(ctx, team_id)
    return {"message": "Team deleted", "detached_members": detached}


@router.get("/{team_id}/members", response_model=List[UserResponse])
def get_team_members(
    team_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    directory.ensure_team_access(ctx, directory.get_team(team_id))
    return directory.team_members(team_id)


@router.get("/{team_id}/stats", response_model=TeamStats)
def get_team_stats(
    team_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    directory.ensure_team_access(ctx, directory.get_team(team_id))
    return ReportService(db).team_stats(team_id, directory.team_members(team_id))


@router.get("/{team_id}/availability", response_model=TeamAvailability)
def get_team_availability(
    team_id: int,
    as_of: Optional[date] = None,
    horizon_days: Optional[int] = Query(None, ge=0, le=366),
    threshold: Optional[float] = Query(None, gt=0, le=1),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    directory.ensure_team_access(ctx, directory.get_team(team_id))

    as_of = as_of or datetime.now(timezone.utc).date()
    horizon = settings.leave.availability_horizon_days if horizon_days is None else horizon_days
    threshold = settings.leave.critical_absence_threshold if threshold is None else threshold

    members = directory.team_members(team_id)
    requests = LeaveRequestStore(db).list(LeaveRequestFilter(
        user_ids=[m.id for m in members], status=LeaveStatus.APPROVED
    ))
    calculator = AvailabilityCalculator(members, requests, as_of, horizon_days=horizon)

    def to_responses(rows):
        return [LeaveRequestResponse.model_validate(r) for r in rows]

    return TeamAvailability(
        team_id=team_id,
        as_of=as_of,
        horizon_days=horizon,
        threshold=threshold,
        members=[MemberStatus(**status_row) for status_row in calculator.team_status()],
        upcoming_absences=to_responses(calculator.upcoming_absences()),
        critical_days=[
            CriticalDay(
                date=day["date"],
                absent_count=day["absent_count"],
                ratio=day["ratio"],
                absentees=to_responses(day["absentees"]),
            )
            for day in calculator.critical_days(threshold)
        ],
        conflicts=[
            ConflictDay(date=day["date"], absentees=to_responses(day["absentees"]))
            for day in calculator.conflicts()
        ],
    )
