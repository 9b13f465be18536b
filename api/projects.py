"""
API endpoints for the project directory.
"""
from typing import Optional, cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import require_project_management, require_project_viewer
from core.database import get_db
from models.project import ProjectStatus
from models.user import User
from schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from services.project_service import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("/", response_model=ProjectResponse)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_project_management)
):
    return ProjectService.create_project(payload, db, cast(UUID, current_user.id))


@router.get("/", response_model=list[ProjectResponse])
def list_projects(
    status: Optional[ProjectStatus] = Query(default=None),
    search: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_project_viewer)
):
    return ProjectService.list_projects(db, status=status, search=search)


@router.get("/{code}", response_model=ProjectResponse)
def get_project(
    code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_project_viewer)
):
    return ProjectService.get_project(code, db)


@router.put("/{code}", response_model=ProjectResponse)
def update_project(
    code: str,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_project_management)
):
    return ProjectService.update_project(code, payload, db)


@router.delete("/{code}")
def delete_project(
    code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_project_management)
):
    """Delete a project; refused while any load still references it."""
    ProjectService.delete_project(code, db)
    return {"deleted": code}
