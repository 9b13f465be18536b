"""
Pydantic schemas for loads, skids, inventory staging and packing lists.

Dimension and weight positivity is enforced by the Load aggregate so the same
rules apply to API calls and direct service use.
"""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.load import LoadStatus


class SkidCreate(BaseModel):
    width: float
    length: float
    weight: Optional[float] = Field(None, description="Omit to estimate from dimensions")
    description: Optional[str] = Field(None, max_length=200)


class SkidUpdate(BaseModel):
    width: Optional[float] = None
    length: Optional[float] = None
    weight: Optional[float] = None
    description: Optional[str] = Field(None, max_length=200)
    original_inv_id: Optional[str] = Field(None, max_length=80)
    source_project: Optional[str] = Field(None, max_length=20)


class SkidResponse(BaseModel):
    id: str
    width: float
    length: float
    weight: float
    description: Optional[str]
    original_inv_id: Optional[str] = None
    source_project: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class InventorySkidResponse(SkidResponse):
    already_on_truck: bool = False


class TruckInfoUpdate(BaseModel):
    truck_id: str = Field(..., max_length=50)
    length: float
    width: float
    weight_capacity: float


class LoadCreate(TruckInfoUpdate):
    project_code: str = Field(..., max_length=20)


class LoadStatusUpdate(BaseModel):
    status: LoadStatus


class PullFromInventoryRequest(BaseModel):
    inventory_project_code: Optional[str] = Field(None, max_length=20, description="Defaults to the load's project")
    skid_ids: List[str] = Field(default_factory=list)


class PullOutcome(BaseModel):
    skid_id: str
    outcome: str
    truck_skid_id: Optional[str] = None


class PullFromInventoryResponse(BaseModel):
    added: int
    skipped: int
    not_found: int
    results: List[PullOutcome]
    skid_count: int
    total_weight: float


class AdditionalProjectRequest(BaseModel):
    project_code: str = Field(..., max_length=20)


class PackingListFields(BaseModel):
    date: Optional[str] = None
    work_order: Optional[str] = Field(None, max_length=120)
    project_name: Optional[str] = Field(None, max_length=100)
    project_address: Optional[str] = Field(None, max_length=200)
    requested_by: Optional[str] = Field(None, max_length=120)
    carrier: Optional[str] = Field(None, max_length=120)
    consignee: Optional[str] = Field(None, max_length=120)
    consignee_address: Optional[str] = Field(None, max_length=200)
    site_contact: Optional[str] = Field(None, max_length=120)
    site_phone: Optional[str] = Field(None, max_length=40)
    delivery_date: Optional[str] = None
    packaged_by: Optional[str] = Field(None, max_length=120)
    checked_by: Optional[str] = Field(None, max_length=120)
    received_by: Optional[str] = Field(None, max_length=120)


class PackingListData(PackingListFields):
    signature: Optional[str] = Field(None, description="Base64 data URL captured from the signature pad")


class PackingListSave(PackingListData):
    confirm_delivery: bool = False


class LoadSkidInput(SkidCreate):
    """A skid in a full load edit; an existing ``id`` updates that skid in place."""
    id: Optional[str] = Field(None, max_length=80)
    original_inv_id: Optional[str] = Field(None, max_length=80)
    source_project: Optional[str] = Field(None, max_length=20)


class LoadUpdate(TruckInfoUpdate):
    project_code: str = Field(..., max_length=20)
    status: Optional[LoadStatus] = None
    skids: Optional[List[LoadSkidInput]] = None
    packing_list: Optional[PackingListData] = None


class SpaceUtilization(BaseModel):
    total_area: float
    truck_area: float
    percentage: float
    formatted_percentage: str


class LoadResponse(BaseModel):
    id: UUID
    truck_id: str
    project_code: str
    status: LoadStatus
    is_inventory: bool
    truck_length: float
    truck_width: float
    weight_capacity: float
    skid_count: int
    total_weight: float
    packing_list: dict = {}
    additional_projects: List[str] = []
    version: int
    date_entered: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None
    skids: List[SkidResponse] = []
    model_config = ConfigDict(from_attributes=True)


class LoadSummaryResponse(BaseModel):
    load: LoadResponse
    project_name: Optional[str] = None
    space_utilization: SpaceUtilization
    is_overweight: bool
    formatted_total_weight: str
    formatted_date: str


class InventoryResponse(BaseModel):
    project_code: str
    load: Optional[LoadResponse] = None
    skids: List[SkidResponse] = []
    skid_count: int = 0
    total_weight: float = 0.0


class InventoryGroup(BaseModel):
    project_code: str
    project_name: Optional[str] = None
    skids: List[InventorySkidResponse] = []


class StagingViewResponse(BaseModel):
    load: LoadResponse
    inventories: List[InventoryGroup]
    space_utilization: SpaceUtilization
    is_overweight: bool


class LoadListResponse(BaseModel):
    total: int
    loads: List[LoadResponse]


class PackingListResponse(BaseModel):
    load: LoadResponse
    fields: dict
    is_signed: bool


class TruckLoadStartResponse(BaseModel):
    load_id: UUID
    truck_id: str
    skid_count: int


class RecentProjectResponse(BaseModel):
    code: str
    name: str
    last_activity: datetime


class LoaderStatsResponse(BaseModel):
    planned_loads: int
    loaded_today: int
    delivered_week: int
    skids_added: int
