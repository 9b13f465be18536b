"""
Loader dashboard: recently active projects and workload counters.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import require_load_viewer
from core.database import get_db
from models.user import User
from schemas.load import LoaderStatsResponse, RecentProjectResponse
from services.load_service import LoadService

router = APIRouter(prefix="/loader", tags=["loader"])


@router.get("/recent-projects", response_model=List[RecentProjectResponse])
def recent_projects(
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    return LoadService.recent_projects(db, limit=limit)


@router.get("/stats", response_model=LoaderStatsResponse)
def loader_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    return LoadService.loader_stats(db)
