"""
Load aggregate: a truck trip (or a project's inventory holding area) and its skids.

The Load owns its skid collection and keeps ``skid_count`` and ``total_weight``
in step with it on every mutation. Persisting is left to the service layer.
"""
from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, List, Optional
import uuid

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.exceptions import InvalidState, NotFound, ValidationError


class LoadStatus(PyEnum):
    PLANNED = "Planned"
    LOADED = "Loaded"
    DELIVERED = "Delivered"


# Forward-only; DELIVERED is terminal outside of the admin override.
VALID_STATUS_TRANSITIONS = {
    LoadStatus.PLANNED: [LoadStatus.LOADED, LoadStatus.DELIVERED],
    LoadStatus.LOADED: [LoadStatus.DELIVERED],
    LoadStatus.DELIVERED: [],
}

PACKING_LIST_FIELDS = (
    "date",
    "work_order",
    "project_name",
    "project_address",
    "requested_by",
    "carrier",
    "consignee",
    "consignee_address",
    "site_contact",
    "site_phone",
    "delivery_date",
    "packaged_by",
    "checked_by",
    "received_by",
    "signature",
)

SKID_DESCRIPTION_MAX_LENGTH = 200
TRUCK_ID_MAX_LENGTH = 50


def _positive_number(label: str, value: Any, errors: List[str]) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(f"{label} must be greater than 0")
        return None
    if number != number or round(number, 2) <= 0:
        errors.append(f"{label} must be greater than 0")
        return None
    return round(number, 2)


def validate_skid_measurements(width: Any, length: Any, weight: Any) -> tuple[float, float, float]:
    """Return rounded (width, length, weight) or raise ValidationError listing every problem."""
    errors: List[str] = []
    width_value = _positive_number("Width", width, errors)
    length_value = _positive_number("Length", length, errors)
    weight_value = _positive_number("Weight", weight, errors)
    if errors:
        raise ValidationError(", ".join(errors))
    return width_value, length_value, weight_value  # type: ignore[return-value]


def _clean_description(description: Optional[str]) -> str:
    text = (description or "").strip()
    if len(text) > SKID_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description cannot exceed {SKID_DESCRIPTION_MAX_LENGTH} characters")
    return text


class Skid(Base):
    __tablename__ = "skids"

    load_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("loads.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    width: Mapped[float] = mapped_column(Float, nullable=False)
    length: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(SKID_DESCRIPTION_MAX_LENGTH), nullable=True)

    original_inv_id: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)
    source_project: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    load: Mapped[Load] = relationship("Load", back_populates="skids")

    @property
    def area(self) -> float:
        return (self.width or 0) * (self.length or 0)

    def __repr__(self) -> str:
        return f"<Skid(id={self.id}, {self.width}x{self.length} ft, {self.weight} lbs)>"


class Load(Base):
    __tablename__ = "loads"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    truck_id: Mapped[str] = mapped_column(String(TRUCK_ID_MAX_LENGTH), nullable=False, index=True)
    project_code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[LoadStatus] = mapped_column(
        Enum(LoadStatus, native_enum=False),
        nullable=False,
        default=LoadStatus.PLANNED
    )
    is_inventory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    truck_length: Mapped[float] = mapped_column(Float, nullable=False)
    truck_width: Mapped[float] = mapped_column(Float, nullable=False)
    weight_capacity: Mapped[float] = mapped_column(Float, nullable=False)

    skid_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    skid_sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    packing_list: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    additional_projects: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    date_entered: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    skids: Mapped[List[Skid]] = relationship(
        "Skid",
        back_populates="load",
        order_by="Skid.position",
        cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}

    # ------------------------------------------------------------------ state

    @property
    def truck_info(self) -> dict:
        return {
            "length": self.truck_length,
            "width": self.truck_width,
            "weight_capacity": self.weight_capacity,
        }

    @property
    def is_delivered(self) -> bool:
        return self.status == LoadStatus.DELIVERED

    @property
    def is_editable(self) -> bool:
        """Skids and truck details may only change while the load is Planned."""
        return self.status == LoadStatus.PLANNED

    def can_transition_to(self, new_status: LoadStatus) -> bool:
        if self.is_inventory:
            return new_status == LoadStatus.PLANNED
        return new_status in VALID_STATUS_TRANSITIONS.get(self.status, [])

    def transition_to(self, new_status: LoadStatus, actor_id: Optional[uuid.UUID] = None) -> bool:
        """Move along Planned -> Loaded -> Delivered. Returns False when already there."""
        if new_status == self.status:
            return False
        if not self.can_transition_to(new_status):
            valid = [] if self.is_inventory else VALID_STATUS_TRANSITIONS.get(self.status, [])
            raise InvalidState(
                f"Cannot transition from {self.status.value} to {new_status.value}. "
                f"Valid transitions: {[s.value for s in valid]}"
            )
        self.status = new_status
        self.touch(actor_id)
        return True

    def force_status(self, new_status: LoadStatus, actor_id: Optional[uuid.UUID] = None) -> None:
        """Admin override: any status, except that inventory loads stay Planned."""
        if self.is_inventory and new_status != LoadStatus.PLANNED:
            raise InvalidState("Inventory loads always remain Planned")
        self.status = new_status
        self.touch(actor_id)

    def touch(self, actor_id: Optional[uuid.UUID] = None) -> None:
        self.updated_at = datetime.utcnow()
        if actor_id is not None:
            self.updated_by = actor_id

    # ------------------------------------------------------------ truck info

    def set_truck_info(
        self,
        truck_id: Optional[str],
        length: Any,
        width: Any,
        weight_capacity: Any,
        min_weight_capacity: float,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        errors: List[str] = []
        cleaned_truck_id = (truck_id or "").strip()
        if not cleaned_truck_id:
            errors.append("Truck ID is required")
        elif len(cleaned_truck_id) > TRUCK_ID_MAX_LENGTH:
            errors.append(f"Truck ID cannot exceed {TRUCK_ID_MAX_LENGTH} characters")
        length_value = _positive_number("Length", length, errors)
        width_value = _positive_number("Width", width, errors)
        try:
            capacity_value = float(weight_capacity)
        except (TypeError, ValueError):
            capacity_value = None
        if capacity_value is None or capacity_value != capacity_value or capacity_value < min_weight_capacity:
            errors.append(f"Weight capacity must be at least {min_weight_capacity:g} lbs")
        if errors:
            raise ValidationError(", ".join(errors))

        self.truck_id = cleaned_truck_id
        self.truck_length = length_value  # type: ignore[assignment]
        self.truck_width = width_value  # type: ignore[assignment]
        self.weight_capacity = capacity_value  # type: ignore[assignment]
        self.touch(actor_id)

    # ----------------------------------------------------------------- skids

    def _bump_sequence(self) -> int:
        self.skid_sequence = (self.skid_sequence or 0) + 1
        return self.skid_sequence

    def _skid_id_for(self, sequence: int) -> str:
        if self.is_inventory:
            return f"INV-{self.project_code}-{sequence}"
        truck_label = "_".join((self.truck_id or "TRUCK").split())
        return f"TRUCK-{truck_label}-{sequence}"

    def next_skid_id(self) -> str:
        """Reserve the next id from the persisted per-load sequence."""
        candidate = self._skid_id_for(self._bump_sequence())
        while self.find_skid(candidate) is not None:
            candidate = self._skid_id_for(self._bump_sequence())
        return candidate

    def find_skid(self, skid_id: str) -> Optional[Skid]:
        for skid in self.skids:
            if skid.id == skid_id:
                return skid
        return None

    def get_skid(self, skid_id: str) -> Skid:
        skid = self.find_skid(skid_id)
        if skid is None:
            raise NotFound(f"Skid {skid_id} not found in load {self.truck_id}")
        return skid

    def carries_inventory_skid(self, inventory_skid_id: str) -> bool:
        return any(skid.original_inv_id == inventory_skid_id for skid in self.skids)

    def recompute_totals(self) -> None:
        self.skid_count = len(self.skids)
        self.total_weight = round(sum(float(skid.weight or 0) for skid in self.skids), 2)

    def add_skid(self, skid: Skid, actor_id: Optional[uuid.UUID] = None) -> Skid:
        skid.width, skid.length, skid.weight = validate_skid_measurements(skid.width, skid.length, skid.weight)
        skid.description = _clean_description(skid.description)

        if skid.id:
            if self.find_skid(skid.id) is not None:
                raise ValidationError(f"Skid {skid.id} already exists in this load")
            skid.position = self._bump_sequence()
        else:
            skid.id = self.next_skid_id()
            skid.position = self.skid_sequence

        self.skids.append(skid)
        self.recompute_totals()
        self.touch(actor_id)
        return skid

    def update_skid(self, skid_id: str, fields: dict, actor_id: Optional[uuid.UUID] = None) -> Skid:
        """Apply a partial update. Provenance keys are only changed when present in ``fields``."""
        skid = self.get_skid(skid_id)

        width, length, weight = validate_skid_measurements(
            fields.get("width", skid.width),
            fields.get("length", skid.length),
            fields.get("weight", skid.weight),
        )
        description = _clean_description(fields["description"]) if "description" in fields else skid.description

        skid.width = width
        skid.length = length
        skid.weight = weight
        skid.description = description
        if "original_inv_id" in fields:
            skid.original_inv_id = fields["original_inv_id"]
        if "source_project" in fields:
            skid.source_project = fields["source_project"]

        self.recompute_totals()
        self.touch(actor_id)
        return skid

    def remove_skid(self, skid_id: str, actor_id: Optional[uuid.UUID] = None) -> Skid:
        skid = self.get_skid(skid_id)
        self.skids.remove(skid)
        self.recompute_totals()
        self.touch(actor_id)
        return skid

    def clear_skids(self, actor_id: Optional[uuid.UUID] = None) -> int:
        removed = len(self.skids)
        self.skids = []
        self.recompute_totals()
        self.touch(actor_id)
        return removed

    # ---------------------------------------------------------- packing list

    def merge_packing_list(self, fields: dict, actor_id: Optional[uuid.UUID] = None) -> dict:
        merged = dict(self.packing_list or {})
        for key, value in fields.items():
            if key in PACKING_LIST_FIELDS:
                merged[key] = value
        # Reassign so the JSON column is flagged dirty.
        self.packing_list = merged
        self.touch(actor_id)
        return merged

    # -------------------------------------------------- additional projects

    def add_additional_project(self, project_code: str, actor_id: Optional[uuid.UUID] = None) -> bool:
        current = list(self.additional_projects or [])
        if project_code == self.project_code or project_code in current:
            return False
        current.append(project_code)
        self.additional_projects = current
        self.touch(actor_id)
        return True

    @property
    def visible_project_codes(self) -> List[str]:
        return [self.project_code] + [code for code in (self.additional_projects or []) if code != self.project_code]

    def __repr__(self) -> str:
        return (
            f"<Load(id={self.id}, truck_id={self.truck_id}, project={self.project_code}, "
            f"status={self.status.value if self.status else None}, inventory={self.is_inventory})>"
        )
