import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.limiter import LOGIN_RATE_LIMIT, limiter
from app.core.permissions import SessionContext
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, get_session_context
from app.schemas.auth import CapabilitiesResponse, LoginRequest, MeResponse, Token
from app.schemas.user import UserResponse
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body instead of form-data for frontend compatibility
    user = db.query(User).filter(func.lower(User.email) == login_data.email.lower()).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        logger.warning(f"Failed login for {login_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")

    access_token = auth_service.create_access_token(data={
        "sub": user.email,
        "role": user.role.value,
        "user_id": user.id,
    })
    logger.info(f"User {user.id} logged in")

    return Token(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=MeResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    ctx: SessionContext = Depends(get_session_context),
):
    return MeResponse(
        user=UserResponse.model_validate(current_user),
        capabilities=CapabilitiesResponse(**ctx.capabilities.model_dump()),
    )
