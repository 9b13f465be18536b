# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.database import get_db
from core.permissions import capabilities_for
from core.security import get_current_user
from models.user import User
from services.auth_service import ACCESS_TOKEN_EXPIRE_MINUTES, AuthService
from schemas.user import UserCreate, UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


def user_profile(user: User) -> dict:
    profile = UserResponse.model_validate(user).model_dump()
    profile["capabilities"] = sorted(cap.value for cap in capabilities_for(user.role))
    return profile


@router.post("/register", response_model=UserResponse)
def register_user(
    user_in: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new loader or viewer account."""
    requested_role = str(user_in.role).strip().upper()
    if requested_role == "ADMIN":
        raise HTTPException(
            status_code=403,
            detail="Admin accounts cannot be self-registered. Contact an administrator."
        )
    user_in.role = requested_role
    return user_profile(AuthService.register_user(user_in, db))


@router.post("/login")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Authenticate user and return access token."""
    user = AuthService.authenticate_user(form_data.username, form_data.password, db)
    access_token = AuthService.create_access_token(
        data={"sub": user.email, "role": user.role}
    )

    response = JSONResponse(content={
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
        "user": user.email
    })

    response.set_cookie(
        key="access_token",
        value=access_token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=False  # Set to True when served over HTTPS
    )

    return response


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Current user profile with the capabilities granted by their role."""
    return user_profile(current_user)
