from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class TeamBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    manager_id: Optional[int] = None


class TeamCreate(TeamBase):
    pass


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    manager_id: Optional[int] = None


class TeamResponse(TeamBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    member_count: Optional[int] = None


class TeamStats(BaseModel):
    team_id: int
    total_members: int
    available_today: int
    absent_today: int
    pending_requests: int
    requests_this_month: int
