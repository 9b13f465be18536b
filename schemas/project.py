"""
Pydantic schemas for the project directory.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.project import ProjectStatus


class ProjectCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    id: UUID
    code: str
    name: str
    status: ProjectStatus
    address: Optional[str]
    description: Optional[str]
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
