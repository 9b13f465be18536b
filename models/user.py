# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from datetime import datetime
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)  # type: ignore
    username = Column(String(50), unique=True, index=True, nullable=False)  # type: ignore
    email = Column(String(255), unique=True, index=True, nullable=False)  # type: ignore
    is_active = Column(Boolean, default=True)  # type: ignore
    hashed_password = Column(String, nullable=False)  # type: ignore
    role = Column(String(16), default="LOADER")  # type: ignore  # ADMIN, LOADER or VIEWER
    created_at = Column(DateTime, default=datetime.utcnow)  # type: ignore
    last_login = Column(DateTime, nullable=True)  # type: ignore
