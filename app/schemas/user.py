from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional
from app.models.user import UserRole
from datetime import datetime

class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=120)
    role: UserRole = UserRole.EMPLOYEE
    team_id: Optional[int] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    # Defaults come from settings.leave when omitted
    vacation_days_balance: Optional[int] = None
    sick_days_balance: Optional[int] = None

class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    role: Optional[UserRole] = None
    team_id: Optional[int] = None
    vacation_days_balance: Optional[int] = None
    sick_days_balance: Optional[int] = None
    is_active: Optional[bool] = None

class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vacation_days_balance: int
    sick_days_balance: int
    is_active: bool = True
    created_at: Optional[datetime] = None

class BalanceSummary(BaseModel):
    user_id: int
    vacation_days_balance: int
    sick_days_balance: int
    pending_vacation_days: int
    available_vacation_days: int
