"""
API endpoints for assembling a truck load on site.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import require_load_viewer, require_truck_assembly
from core.database import get_db
from models.user import User
from schemas.load import (
    AdditionalProjectRequest,
    LoadResponse,
    LoadSummaryResponse,
    PackingListResponse,
    PackingListSave,
    PullFromInventoryRequest,
    PullFromInventoryResponse,
    SkidCreate,
    SkidResponse,
    SkidUpdate,
    StagingViewResponse,
    TruckInfoUpdate,
    TruckLoadStartResponse,
)
from schemas.project import ProjectResponse
from services.load_service import LoadService
from services.packing_list_service import PackingListService
from services.truck_load_service import TruckLoadService

router = APIRouter(prefix="/loader/truck", tags=["truck-loads"])


@router.post("/{project_code}/start", response_model=TruckLoadStartResponse)
def start_or_resume_truck_load(
    project_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    """Resume the project's open truck load or start a new one."""
    load = TruckLoadService.start_or_resume_truck_load(project_code, current_user, db)
    return {"load_id": load.id, "truck_id": load.truck_id, "skid_count": load.skid_count}


@router.get("/{project_code}/loads/{load_id}", response_model=StagingViewResponse)
def get_staging_view(
    project_code: str,
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    return TruckLoadService.get_staging_view(project_code, load_id, db)


@router.put("/{project_code}/loads/{load_id}/truck-info", response_model=LoadResponse)
def save_truck_info(
    project_code: str,
    load_id: str,
    payload: TruckInfoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    return TruckLoadService.save_truck_info(project_code, load_id, payload, current_user, db)


@router.post("/{project_code}/loads/{load_id}/skids", response_model=SkidResponse)
def add_skid_to_truck(
    project_code: str,
    load_id: str,
    payload: SkidCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    return TruckLoadService.add_skid_to_truck(project_code, load_id, payload, current_user, db)


@router.put("/{project_code}/loads/{load_id}/skids/{skid_id}", response_model=SkidResponse)
def update_truck_skid(
    project_code: str,
    load_id: str,
    skid_id: str,
    payload: SkidUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    return TruckLoadService.update_truck_skid(project_code, load_id, skid_id, payload, current_user, db)


@router.delete("/{project_code}/loads/{load_id}/skids/{skid_id}", response_model=LoadResponse)
def remove_skid_from_truck(
    project_code: str,
    load_id: str,
    skid_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    return TruckLoadService.remove_skid_from_truck(project_code, load_id, skid_id, current_user, db)


@router.delete("/{project_code}/loads/{load_id}/skids")
def clear_truck_skids(
    project_code: str,
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    removed = TruckLoadService.clear_truck_skids(project_code, load_id, current_user, db)
    return {"load_id": load_id, "removed": removed}


@router.post("/{project_code}/loads/{load_id}/pull-from-inventory", response_model=PullFromInventoryResponse)
def pull_from_inventory(
    project_code: str,
    load_id: str,
    payload: PullFromInventoryRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    """Copy selected inventory skids onto the truck, reporting an outcome per skid."""
    return TruckLoadService.pull_from_inventory(
        project_code,
        load_id,
        payload.inventory_project_code,
        payload.skid_ids,
        current_user,
        db
    )


@router.post("/{project_code}/loads/{load_id}/additional-projects", response_model=LoadResponse)
def add_additional_project(
    project_code: str,
    load_id: str,
    payload: AdditionalProjectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    return TruckLoadService.add_additional_project(project_code, load_id, payload.project_code, current_user, db)


@router.get("/{project_code}/loads/{load_id}/available-projects", response_model=list[ProjectResponse])
def list_available_projects(
    project_code: str,
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    """Active projects that can still be linked to this load."""
    return TruckLoadService.list_available_projects(project_code, load_id, db)


@router.get("/{project_code}/loads/{load_id}/packing-list", response_model=PackingListResponse)
def get_packing_list(
    project_code: str,
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    return PackingListService.get_packing_list(project_code, load_id, db)


@router.put("/{project_code}/loads/{load_id}/packing-list", response_model=LoadResponse)
def save_packing_list(
    project_code: str,
    load_id: str,
    payload: PackingListSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_truck_assembly)
):
    """Save packing list fields; a signature moves the load to Loaded or Delivered."""
    fields = payload.model_dump(exclude_unset=True, exclude={"signature", "confirm_delivery"})
    return PackingListService.save_packing_list(
        project_code,
        load_id,
        fields,
        payload.signature,
        current_user,
        db,
        confirm_delivery=payload.confirm_delivery
    )


@router.get("/{project_code}/loads/{load_id}/summary", response_model=LoadSummaryResponse)
def get_load_summary(
    project_code: str,
    load_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_load_viewer)
):
    """Data for the printable load sheet."""
    load = TruckLoadService.get_truck_load(project_code, load_id, db)
    return LoadService.build_summary(load, db)
