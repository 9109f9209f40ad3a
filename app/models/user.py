"""
User Model with role-based access.
Balances live on the user row and are debited by the balance ledger.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class UserRole(str, enum.Enum):
    """
    User roles, from least to most permissions.

    - EMPLOYEE: Self-service access (own requests, own balance)
    - MANAGER: Reviews leave requests, sees the teams they manage
    - HR: Full access, including holidays and user administration
    """
    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)

    team_id = Column(Integer, ForeignKey("teams.id", use_alter=True, name="fk_user_team_id", ondelete="SET NULL"), nullable=True, index=True)

    vacation_days_balance = Column(Integer, default=22, nullable=False)
    sick_days_balance = Column(Integer, default=3, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    team = relationship("Team", foreign_keys=[team_id], back_populates="members")
    managed_teams = relationship("Team", foreign_keys="Team.manager_id", back_populates="manager")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    leave_requests = relationship("LeaveRequest", foreign_keys="[LeaveRequest.user_id]", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
