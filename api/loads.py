"""
Office-side load management: listing, explicit creation, full edits, status override and deletion.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import require_load_management, require_load_viewer, require_status_override
from core.database import get_db
from models.load import LoadStatus
from models.user import User
from schemas.load import (
    LoadCreate,
    LoadListResponse,
    LoadResponse,
    LoadStatusUpdate,
    LoadSummaryResponse,
    LoadUpdate,
)
from services.load_service import LoadService
from services.project_service import ProjectService

router = APIRouter(prefix="/loads", tags=["loads"])


@router.get("/", response_model=LoadListResponse)
def list_loads(
    project_code: Optional[str] = Query(default=None),
    status: Optional[LoadStatus] = Query(default=None),
    search: Optional[str] = Query(default=None),
    include_inventory: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    total, loads = LoadService.list_loads(
        db,
        project_code=project_code,
        status=status,
        search=search,
        include_inventory=include_inventory,
        limit=limit,
        offset=offset
    )
    return {"total": total, "loads": loads}


@router.get("/count")
def count_loads(
    project_code: str = Query(...),
    include_inventory: bool = Query(default=True),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    """Number of loads that reference a project."""
    return {
        "project_code": project_code,
        "count": ProjectService.count_loads(project_code, db, include_inventory=include_inventory)
    }


@router.post("/", response_model=LoadResponse)
def create_load(
    payload: LoadCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_management)
):
    return LoadService.create_load(payload, current_user, db)


@router.get("/{load_id}", response_model=LoadSummaryResponse)
def get_load(
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    """Load details with space utilization and weight summary."""
    load = LoadService.get_load(load_id, db)
    return LoadService.build_summary(load, db)


@router.put("/{load_id}", response_model=LoadResponse)
def update_load(
    load_id: str,
    payload: LoadUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_management)
):
    """Edit truck details, project, status, skids and packing list of a load that is not yet Delivered."""
    return LoadService.update_load(load_id, payload, current_user, db)


@router.put("/{load_id}/status", response_model=LoadResponse)
def override_load_status(
    load_id: str,
    payload: LoadStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_status_override)
):
    """Set any status, bypassing the packing list flow."""
    return LoadService.update_status(load_id, payload.status, current_user, db)


@router.delete("/{load_id}")
def delete_load(
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_management)
):
    LoadService.delete_load(load_id, current_user, db)
    return {"deleted": load_id}
