from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError
from app.core.permissions import SessionContext
from app.database import get_db
from app.models.user import UserRole
from app.routers.auth_deps import get_session_context
from app.schemas.user import BalanceSummary, UserCreate, UserResponse, UserUpdate
from app.services.balance_ledger import BalanceLedger
from app.services.directory import DirectoryService
from app.services.leave_store import LeaveRequestStore

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/", response_model=List[UserResponse])
def list_users(
    team_id: Optional[int] = None,
    role: Optional[UserRole] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    users = DirectoryService(db).list_users(team_id=team_id, role=role)
    visible = LeaveRequestStore(db).visible_user_ids(ctx)
    if visible is not None:
        users = [u for u in users if u.id in visible]
    return users


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return DirectoryService(db).create_user(ctx, data)


def _ensure_visible(db: Session, ctx: SessionContext, user_id: int):
    visible = LeaveRequestStore(db).visible_user_ids(ctx)
    if visible is not None and user_id not in visible:
        raise AccessDeniedError("You can only view your own profile or members of your teams")


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    directory = DirectoryService(db)
    user = directory.get_user(user_id)
    _ensure_visible(db, ctx, user.id)
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return DirectoryService(db).update_user(ctx, user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    DirectoryService(db).delete_user(ctx, user_id)


@router.get("/{user_id}/balance", response_model=BalanceSummary)
def get_user_balance(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    DirectoryService(db).get_user(user_id)
    _ensure_visible(db, ctx, user_id)
    return BalanceLedger(db).summary(user_id)
