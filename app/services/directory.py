"""
Directory Service

User and team administration. Writes require the can_manage_users
capability (HR). Deleting a team detaches its members instead of
deleting them.
"""
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from app.core.permissions import SessionContext
from app.models.team import Team
from app.models.user import User, UserRole
from app.schemas.team import TeamCreate, TeamUpdate
from app.schemas.user import UserCreate, UserUpdate
from app.services import auth as auth_service
from app.services.base import BaseService

MANAGER_ROLES = (UserRole.MANAGER, UserRole.HR)


class DirectoryService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self, team_id: Optional[int] = None, role: Optional[UserRole] = None) -> List[User]:
        query = self.db.query(User)
        if team_id is not None:
            query = query.filter(User.team_id == team_id)
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def _ensure_email_free(self, email: str, exclude_id: Optional[int] = None):
        query = self.db.query(User).filter(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ValidationError(f"Email {email} is already registered", details={"email": email})

    def _ensure_team(self, team_id: Optional[int]):
        if team_id is not None and not self.db.get(Team, team_id):
            raise NotFoundError("Team", team_id)

    def create_user(self, ctx: SessionContext, data: UserCreate) -> User:
        ctx.require("can_manage_users", "manage users")
        self._ensure_email_free(data.email)
        self._ensure_team(data.team_id)

        user = User(
            email=data.email,
            hashed_password=auth_service.get_password_hash(data.password),
            name=data.name.strip(),
            role=data.role,
            team_id=data.team_id,
            vacation_days_balance=(
                data.vacation_days_balance if data.vacation_days_balance is not None
                else settings.leave.default_vacation_days
            ),
            sick_days_balance=(
                data.sick_days_balance if data.sick_days_balance is not None
                else settings.leave.default_sick_days
            ),
            is_active=True,
        )
        with self.unit_of_work():
            self.db.add(user)
        self.db.refresh(user)
        self.log_info(f"User {user.id} created ({user.role.value})")
        return user

    def update_user(self, ctx: SessionContext, user_id: int, data: UserUpdate) -> User:
        ctx.require("can_manage_users", "manage users")
        user = self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("email"):
            self._ensure_email_free(changes["email"], exclude_id=user.id)
        if "team_id" in changes:
            self._ensure_team(changes["team_id"])
        demoted = changes.get("role") is not None and changes["role"] not in MANAGER_ROLES

        with self.unit_of_work():
            for field, value in changes.items():
                if value is None and field != "team_id":
                    continue
                setattr(user, field, value)
            if demoted:
                # Only managers and HR may manage a team
                released = self.db.query(Team).filter(Team.manager_id == user.id).update(
                    {Team.manager_id: None}, synchronize_session=False
                )
                if released:
                    self.log_warning(f"User {user.id} no longer manages {released} team(s) after role change")
        if demoted:
            self.db.expire_all()
        self.db.refresh(user)
        self.log_info(f"User {user.id} updated: {sorted(changes)}")
        return user

    def delete_user(self, ctx: SessionContext, user_id: int) -> None:
        ctx.require("can_manage_users", "manage users")
        if user_id == ctx.user_id:
            raise ValidationError("You cannot delete your own account")
        user = self.get_user(user_id)
        with self.unit_of_work():
            self.db.query(Team).filter(Team.manager_id == user.id).update(
                {Team.manager_id: None}, synchronize_session=False
            )
            self.db.delete(user)
        self.log_info(f"User {user_id} deleted")

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def get_team(self, team_id: int) -> Team:
        team = self.db.get(Team, team_id)
        if not team:
            raise NotFoundError("Team", team_id)
        return team

    def list_teams(self) -> List[Team]:
        return self.db.query(Team).order_by(Team.created_at.desc(), Team.id.desc()).all()

    def team_members(self, team_id: int) -> List[User]:
        self.get_team(team_id)
        return self.db.query(User).filter(User.team_id == team_id).order_by(User.name.asc()).all()

    def member_count(self, team_id: int) -> int:
        return self.db.query(User).filter(User.team_id == team_id).count()

    def ensure_team_access(self, ctx: SessionContext, team: Team) -> None:
        """HR sees every team; managers their own teams; employees the team they belong to."""
        if ctx.capabilities.can_manage_users or team.manager_id == ctx.user_id:
            return
        caller = self.get_user(ctx.user_id)
        if caller.team_id != team.id:
            raise AccessDeniedError("You can only view teams you belong to or manage")

    def _ensure_manager(self, manager_id: Optional[int]):
        if manager_id is None:
            return
        manager = self.get_user(manager_id)
        if manager.role not in MANAGER_ROLES:
            raise ValidationError(
                f"User {manager_id} cannot manage a team (role {manager.role.value})",
                details={"manager_id": manager_id}
            )

    def create_team(self, ctx: SessionContext, data: TeamCreate) -> Team:
        ctx.require("can_manage_users", "manage teams")
        self._ensure_manager(data.manager_id)
        team = Team(name=data.name.strip(), manager_id=data.manager_id)
        with self.unit_of_work():
            self.db.add(team)
        self.db.refresh(team)
        self.log_info(f"Team {team.id} created: {team.name}")
        return team

    def update_team(self, ctx: SessionContext, team_id: int, data: TeamUpdate) -> Team:
        ctx.require("can_manage_users", "manage teams")
        team = self.get_team(team_id)
        changes = data.model_dump(exclude_unset=True)
        if "manager_id" in changes:
            self._ensure_manager(changes["manager_id"])

        with self.unit_of_work():
            if changes.get("name"):
                team.name = changes["name"].strip()
            if "manager_id" in changes:
                team.manager_id = changes["manager_id"]
        self.db.refresh(team)
        return team

    def delete_team(self, ctx: SessionContext, team_id: int) -> int:
        """Delete the team and detach its members. Returns how many members were detached."""
        ctx.require("can_manage_users", "manage teams")
        team = self.get_team(team_id)
        with self.unit_of_work():
            detached = self.db.query(User).filter(User.team_id == team.id).update(
                {User.team_id: None}, synchronize_session=False
            )
            self.db.delete(team)
        # Bulk update bypassed the identity map
        self.db.expire_all()
        self.log_info(f"Team {team_id} deleted; {detached} member(s) detached")
        return detached
