"""
Service layer for assembling truck loads on site.

A loader starts (or resumes) a Planned truck load for a project, fills in the
truck details, adds skids by hand or pulls them from one or more project
inventories, and finally signs the packing list. Every mutation commits once;
a failure before the commit leaves the load untouched.
"""
import logging
import uuid
from typing import Any, List, Optional, Union

from sqlalchemy.orm import Session

from core.exceptions import InvalidState, ProjectMismatch, ValidationError
from models.load import Load, LoadStatus, Skid
from models.project import Project, ProjectStatus
from schemas.load import SkidCreate, SkidUpdate, TruckInfoUpdate
from services.audit_service import AuditService
from services.config_service import get_min_weight_capacity, get_placeholder_truck_info
from services.load_service import LoadService, actor_id_of, build_skid, rollback_on_error
from services.measurements import compute_space_utilization, is_overweight
from services.project_service import ProjectService

log = logging.getLogger(__name__)

PULL_ADDED = "added"
PULL_ALREADY_ON_TRUCK = "already_on_truck"
PULL_NOT_FOUND = "not_found"


class TruckLoadService:
    @staticmethod
    def _get_truck_load(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        db: Session,
        require_planned: bool = False
    ) -> Load:
        ProjectService.require_active_project(project_code, db)
        load = LoadService.get_project_load(project_code, load_id, db)
        if load.is_inventory:
            raise InvalidState("Inventory loads cannot be edited as truck loads")
        if require_planned and not load.is_editable:
            log.warning("Rejected edit of load %s in status %s", load.id, load.status.value)
            raise InvalidState(
                f"Load {load.truck_id} is {load.status.value}; only Planned loads can be changed"
            )
        return load

    @staticmethod
    def get_truck_load(project_code: str, load_id: Union[str, uuid.UUID], db: Session) -> Load:
        return TruckLoadService._get_truck_load(project_code, load_id, db)

    @staticmethod
    def start_or_resume_truck_load(project_code: str, actor: Any, db: Session) -> Load:
        """Newest Planned truck load of the project, or a fresh one with placeholder truck details."""
        ProjectService.require_active_project(project_code, db)

        existing = db.query(Load).filter(
            Load.project_code == project_code,
            Load.is_inventory.is_(False),
            Load.status == LoadStatus.PLANNED
        ).order_by(Load.date_entered.desc()).first()
        if existing:
            log.info("Resuming truck load %s for project %s", existing.id, project_code)
            return existing

        truck_info = get_placeholder_truck_info()
        load = Load(
            id=uuid.uuid4(),
            truck_id=f"TBD-{project_code}"[:50],
            project_code=project_code,
            status=LoadStatus.PLANNED,
            is_inventory=False,
            truck_length=truck_info["length"],
            truck_width=truck_info["width"],
            weight_capacity=truck_info["weight_capacity"],
            packing_list={},
            additional_projects=[],
            skid_sequence=0,
            skid_count=0,
            total_weight=0.0,
            created_by=actor_id_of(actor),
        )
        db.add(load)
        AuditService.record_load_event(db, action="load.created", load=load, actor=actor)
        LoadService.commit(db, load)
        log.info("Started truck load %s for project %s", load.id, project_code)
        return load

    @staticmethod
    def save_truck_info(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        data: TruckInfoUpdate,
        actor: Any,
        db: Session
    ) -> Load:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        previous_truck_id = load.truck_id

        with rollback_on_error(db):
            load.set_truck_info(
                data.truck_id, data.length, data.width, data.weight_capacity,
                get_min_weight_capacity(), actor_id_of(actor)
            )
            AuditService.record_load_event(
                db,
                action="load.truck_info_saved",
                load=load,
                actor=actor,
                metadata={"previous_truck_id": previous_truck_id, **load.truck_info},
            )
            LoadService.commit(db, load)
        log.info("Saved truck info for load %s (%s)", load.id, load.truck_id)
        return load

    @staticmethod
    def add_skid_to_truck(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        data: SkidCreate,
        actor: Any,
        db: Session
    ) -> Skid:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        with rollback_on_error(db):
            skid = load.add_skid(build_skid(data), actor_id_of(actor))
            LoadService.commit(db, load)
        log.info("Added skid %s to load %s", skid.id, load.id)
        return skid

    @staticmethod
    def update_truck_skid(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        skid_id: str,
        data: SkidUpdate,
        actor: Any,
        db: Session
    ) -> Skid:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        with rollback_on_error(db):
            skid = load.update_skid(skid_id, data.model_dump(exclude_unset=True), actor_id_of(actor))
            LoadService.commit(db, load)
        return skid

    @staticmethod
    def remove_skid_from_truck(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        skid_id: str,
        actor: Any,
        db: Session
    ) -> Load:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        with rollback_on_error(db):
            load.remove_skid(skid_id, actor_id_of(actor))
            LoadService.commit(db, load)
        log.info("Removed skid %s from load %s", skid_id, load.id)
        return load

    @staticmethod
    def clear_truck_skids(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        actor: Any,
        db: Session
    ) -> int:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        with rollback_on_error(db):
            removed = load.clear_skids(actor_id_of(actor))
            AuditService.record_load_event(
                db,
                action="load.skids_cleared",
                load=load,
                actor=actor,
                metadata={"removed": removed},
            )
            LoadService.commit(db, load)
        log.info("Cleared %s skids from load %s", removed, load.id)
        return removed

    @staticmethod
    def pull_from_inventory(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        inventory_project_code: Optional[str],
        skid_ids: List[str],
        actor: Any,
        db: Session
    ) -> dict:
        """
        Copy inventory skids onto the truck.

        Each requested id gets its own outcome; a skid already carried by the
        truck (matched on ``original_inv_id``) is skipped rather than duplicated.
        The inventory keeps its skids.
        """
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        source_code = (inventory_project_code or project_code).strip()
        if source_code not in load.visible_project_codes:
            raise ProjectMismatch(
                f"Project {source_code} is not linked to load {load.truck_id}"
            )
        if not skid_ids:
            raise ValidationError("Select at least one inventory skid to pull")

        inventory = LoadService.find_inventory_load(source_code, db)
        actor_id = actor_id_of(actor)
        results = []
        with rollback_on_error(db):
            for skid_id in skid_ids:
                if load.carries_inventory_skid(skid_id):
                    results.append({"skid_id": skid_id, "outcome": PULL_ALREADY_ON_TRUCK, "truck_skid_id": None})
                    continue

                source = inventory.find_skid(skid_id) if inventory is not None else None
                if source is None:
                    results.append({"skid_id": skid_id, "outcome": PULL_NOT_FOUND, "truck_skid_id": None})
                    continue

                truck_skid = load.add_skid(
                    Skid(
                        width=source.width,
                        length=source.length,
                        weight=source.weight,
                        description=source.description,
                        original_inv_id=source.id,
                        source_project=source_code,
                    ),
                    actor_id
                )
                results.append({"skid_id": skid_id, "outcome": PULL_ADDED, "truck_skid_id": truck_skid.id})

            added = sum(1 for result in results if result["outcome"] == PULL_ADDED)
            skipped = sum(1 for result in results if result["outcome"] == PULL_ALREADY_ON_TRUCK)
            not_found = sum(1 for result in results if result["outcome"] == PULL_NOT_FOUND)

            AuditService.record_load_event(
                db,
                action="load.pulled_from_inventory",
                load=load,
                actor=actor,
                metadata={
                    "inventory_project_code": source_code,
                    "added": added,
                    "skipped": skipped,
                    "not_found": not_found,
                },
            )
            LoadService.commit(db, load)
        log.info(
            "Pulled from %s inventory into load %s: added=%s skipped=%s not_found=%s",
            source_code, load.id, added, skipped, not_found
        )
        return {
            "added": added,
            "skipped": skipped,
            "not_found": not_found,
            "results": results,
            "skid_count": load.skid_count,
            "total_weight": load.total_weight,
        }

    @staticmethod
    def add_additional_project(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        extra_project_code: str,
        actor: Any,
        db: Session
    ) -> Load:
        load = TruckLoadService._get_truck_load(project_code, load_id, db, require_planned=True)
        extra = ProjectService.require_active_project(extra_project_code, db)

        with rollback_on_error(db):
            if not load.add_additional_project(extra.code, actor_id_of(actor)):
                return load

            AuditService.record_load_event(
                db,
                action="load.additional_project_added",
                load=load,
                actor=actor,
                metadata={"project_code": extra.code},
            )
            LoadService.commit(db, load)
        log.info("Linked project %s to load %s", extra.code, load.id)
        return load

    @staticmethod
    def list_available_projects(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        db: Session
    ) -> List[Project]:
        load = TruckLoadService._get_truck_load(project_code, load_id, db)
        visible = set(load.visible_project_codes)
        return [
            project for project in ProjectService.list_projects(db, status=ProjectStatus.ACTIVE)
            if project.code not in visible
        ]

    @staticmethod
    def get_staging_view(project_code: str, load_id: Union[str, uuid.UUID], db: Session) -> dict:
        """The truck load next to every inventory it may pull from."""
        load = TruckLoadService._get_truck_load(project_code, load_id, db)

        inventories = []
        for code in load.visible_project_codes:
            project = ProjectService.find_project(code, db)
            inventory = LoadService.find_inventory_load(code, db)
            skids = []
            for skid in (inventory.skids if inventory is not None else []):
                skids.append({
                    "id": skid.id,
                    "width": skid.width,
                    "length": skid.length,
                    "weight": skid.weight,
                    "description": skid.description,
                    "already_on_truck": load.carries_inventory_skid(skid.id),
                })
            inventories.append({
                "project_code": code,
                "project_name": project.name if project else None,
                "skids": skids,
            })

        return {
            "load": load,
            "inventories": inventories,
            "space_utilization": compute_space_utilization(load),
            "is_overweight": is_overweight(load),
        }
