"""
Admin endpoints for user management.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.auth import user_profile
from api.dependencies import require_admin
from core.database import get_db
from models.user import User
from schemas.user import UserCreate, UserResponse, UserUpdate
from services.auth_service import AuthService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    """List all users for admin management."""
    return [user_profile(user) for user in AuthService.list_users(db)]


@router.post("/users", response_model=UserResponse)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db)
):
    """Create an account with any role, including ADMIN."""
    return user_profile(AuthService.register_user(payload, db))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Update role, active state or password."""
    if str(user_id) == str(current_user.id) and payload.is_active is False:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
    return user_profile(AuthService.update_user(user_id, payload, db))
