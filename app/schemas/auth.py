from pydantic import BaseModel, EmailStr
from typing import Optional
from app.schemas.user import UserResponse

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str
    user: Optional[UserResponse] = None

class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
    user_id: Optional[int] = None

class CapabilitiesResponse(BaseModel):
    can_review: bool
    can_manage_holidays: bool
    can_manage_users: bool

class MeResponse(BaseModel):
    user: UserResponse
    capabilities: CapabilitiesResponse
