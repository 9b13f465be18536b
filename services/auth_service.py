# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status
import os
from dotenv import load_dotenv

from core.permissions import ROLES, normalize_role
from models.user import User
from schemas.user import UserCreate, UserUpdate

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_LOADBUILDER_SECRET")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12
)


class AuthService:
    """Identity provider: password hashing, tokens and user lookups."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def validate_role(role: str) -> str:
        normalized = normalize_role(role)
        if normalized not in ROLES:
            raise HTTPException(status_code=400, detail=f"Invalid role. Expected one of {list(ROLES)}")
        return normalized

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token."""
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> dict:
        """Verify JWT token and return payload."""
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            raise credentials_exception
        if payload.get("sub") is None:
            raise credentials_exception
        return payload

    @staticmethod
    def register_user(user_in: UserCreate, db: Session) -> User:
        existing = db.query(User).filter(  # type: ignore
            (User.email == user_in.email) | (User.username == user_in.username)
        ).first()

        if existing:
            raise HTTPException(
                status_code=400,
                detail="User with this email or username already exists."
            )

        new_user = User(
            email=user_in.email,
            username=user_in.username,
            hashed_password=AuthService.get_password_hash(user_in.password),
            role=AuthService.validate_role(user_in.role)
        )

        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        return new_user

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        user = db.query(User).filter(User.email == email).first()  # type: ignore

        if not user or not AuthService.verify_password(password, str(user.hashed_password)):
            raise HTTPException(
                status_code=401,
                detail="Incorrect email or password"
            )
        if not user.is_active:
            raise HTTPException(status_code=403, detail="Account is inactive")

        user.last_login = datetime.utcnow()  # type: ignore[assignment]
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_user_from_token(token: str, db: Session) -> User:
        payload = AuthService.verify_token(token)
        email = str(payload.get("sub"))

        user = db.query(User).filter(User.email == email).first()  # type: ignore
        if user is None:
            raise HTTPException(status_code=401, detail="User not found")
        return user

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.username.asc()).all()

    @staticmethod
    def update_user(user_id: UUID, data: UserUpdate, db: Session) -> User:
        user = db.query(User).filter(User.id == user_id).first()  # type: ignore
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if data.role is not None:
            user.role = AuthService.validate_role(data.role)  # type: ignore[assignment]
        if data.is_active is not None:
            user.is_active = data.is_active  # type: ignore[assignment]
        if data.password:
            user.hashed_password = AuthService.get_password_hash(data.password)  # type: ignore[assignment]

        db.commit()
        db.refresh(user)
        return user
