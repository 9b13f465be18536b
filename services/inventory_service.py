"""
Service layer for per-project inventory staging.

Each project has at most one inventory pseudo-load (``is_inventory=True``) that
holds skids waiting to be put on a truck. It never leaves the Planned status.
"""
import logging
import uuid
from typing import Any, Optional

from sqlalchemy.orm import Session

from core.exceptions import NotFound
from models.load import Load, LoadStatus, Skid
from schemas.load import SkidCreate, SkidUpdate
from services.audit_service import AuditService
from services.config_service import get_inventory_truck_info
from services.load_service import LoadService, actor_id_of, build_skid, rollback_on_error
from services.project_service import ProjectService

log = logging.getLogger(__name__)


class InventoryService:
    @staticmethod
    def _build_inventory_load(project_code: str, actor: Any, db: Session) -> Load:
        truck_info = get_inventory_truck_info()
        load = Load(
            id=uuid.uuid4(),
            truck_id=f"INVENTORY-{project_code}"[:50],
            project_code=project_code,
            status=LoadStatus.PLANNED,
            is_inventory=True,
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
        log.info("Created inventory load for project %s", project_code)
        return load

    @staticmethod
    def _find_or_build(project_code: str, actor: Any, db: Session) -> Load:
        load = LoadService.find_inventory_load(project_code, db)
        if load is None:
            load = InventoryService._build_inventory_load(project_code, actor, db)
        return load

    @staticmethod
    def get_inventory(project_code: str, db: Session) -> Optional[Load]:
        ProjectService.require_active_project(project_code, db)
        return LoadService.find_inventory_load(project_code, db)

    @staticmethod
    def _require_inventory(project_code: str, db: Session) -> Load:
        inventory = InventoryService.get_inventory(project_code, db)
        if inventory is None:
            raise NotFound(f"No inventory found for project {project_code}")
        return inventory

    @staticmethod
    def get_or_create_inventory(project_code: str, actor: Any, db: Session) -> Load:
        ProjectService.require_active_project(project_code, db)
        existing = LoadService.find_inventory_load(project_code, db)
        if existing is not None:
            return existing

        load = InventoryService._build_inventory_load(project_code, actor, db)
        LoadService.commit(db, load)
        return load

    @staticmethod
    def add_inventory_skid(project_code: str, data: SkidCreate, actor: Any, db: Session) -> Skid:
        ProjectService.require_active_project(project_code, db)
        # Reject bad measurements before a new inventory load is staged in the session.
        skid = build_skid(data)

        with rollback_on_error(db):
            load = InventoryService._find_or_build(project_code, actor, db)
            load.add_skid(skid, actor_id_of(actor))
            LoadService.commit(db, load)
        log.info("Added inventory skid %s to project %s", skid.id, project_code)
        return skid

    @staticmethod
    def update_inventory_skid(
        project_code: str,
        skid_id: str,
        data: SkidUpdate,
        actor: Any,
        db: Session
    ) -> Skid:
        inventory = InventoryService._require_inventory(project_code, db)

        fields = data.model_dump(exclude_unset=True)
        # Provenance only applies to truck skids.
        fields.pop("original_inv_id", None)
        fields.pop("source_project", None)

        with rollback_on_error(db):
            skid = inventory.update_skid(skid_id, fields, actor_id_of(actor))
            LoadService.commit(db, inventory)
        return skid

    @staticmethod
    def delete_inventory_skid(project_code: str, skid_id: str, actor: Any, db: Session) -> Load:
        inventory = InventoryService._require_inventory(project_code, db)

        with rollback_on_error(db):
            inventory.remove_skid(skid_id, actor_id_of(actor))
            LoadService.commit(db, inventory)
        log.info("Deleted inventory skid %s from project %s", skid_id, project_code)
        return inventory

    @staticmethod
    def clear_inventory(project_code: str, actor: Any, db: Session) -> int:
        """Remove every staged skid. Clearing an empty or missing inventory is a no-op."""
        inventory = InventoryService.get_inventory(project_code, db)
        if inventory is None or not inventory.skids:
            return 0

        with rollback_on_error(db):
            removed = inventory.clear_skids(actor_id_of(actor))
            AuditService.record_load_event(
                db,
                action="inventory.cleared",
                load=inventory,
                actor=actor,
                metadata={"removed": removed},
            )
            LoadService.commit(db, inventory)
        log.info("Cleared %s inventory skids for project %s", removed, project_code)
        return removed
