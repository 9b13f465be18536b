"""
API endpoints for per-project inventory staging.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import require_inventory_staging
from core.database import get_db
from models.user import User
from schemas.load import InventoryResponse, SkidCreate, SkidResponse, SkidUpdate
from services.inventory_service import InventoryService

router = APIRouter(prefix="/loader/inventory", tags=["inventory"])


def _inventory_payload(project_code: str, load) -> dict:
    if load is None:
        return {"project_code": project_code, "load": None, "skids": [], "skid_count": 0, "total_weight": 0.0}
    return {
        "project_code": project_code,
        "load": load,
        "skids": load.skids,
        "skid_count": load.skid_count,
        "total_weight": load.total_weight,
    }


@router.get("/{project_code}", response_model=InventoryResponse)
def get_or_create_inventory(
    project_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_inventory_staging)
):
    """Open the project's inventory, creating it on first use."""
    load = InventoryService.get_or_create_inventory(project_code, current_user, db)
    return _inventory_payload(project_code, load)


@router.post("/{project_code}/skids", response_model=SkidResponse)
def add_inventory_skid(
    project_code: str,
    payload: SkidCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_inventory_staging)
):
    return InventoryService.add_inventory_skid(project_code, payload, current_user, db)


@router.put("/{project_code}/skids/{skid_id}", response_model=SkidResponse)
def update_inventory_skid(
    project_code: str,
    skid_id: str,
    payload: SkidUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_inventory_staging)
):
    return InventoryService.update_inventory_skid(project_code, skid_id, payload, current_user, db)


@router.delete("/{project_code}/skids/{skid_id}", response_model=InventoryResponse)
def delete_inventory_skid(
    project_code: str,
    skid_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_inventory_staging)
):
    load = InventoryService.delete_inventory_skid(project_code, skid_id, current_user, db)
    return _inventory_payload(project_code, load)


@router.delete("/{project_code}/skids")
def clear_inventory(
    project_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_inventory_staging)
):
    """Remove every staged skid; an empty inventory is left as is."""
    removed = InventoryService.clear_inventory(project_code, current_user, db)
    return {"project_code": project_code, "removed": removed}
