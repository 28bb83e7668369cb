import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from siamleave.core.config import settings
from siamleave.core.limiter import limiter
from siamleave.database import get_db
from siamleave.models.user import User
from siamleave.routers.auth_deps import get_current_user
from siamleave.schemas.auth import LoginRequest, Token, UserResponse
from siamleave.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body instead of form-data for frontend compatibility
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        logger.info(f"Failed login for {login_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")

    access_token = auth_service.create_access_token(data={
        "sub": user.id,
        "role": user.role.value,
        "position_id": user.position_id,
    })
    logger.info(f"User {user.id} logged in")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
    }

@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
