"""
Shared load lookups, persistence and admin load management.
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Iterator, List, Optional, Tuple, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import (
    ConcurrentUpdate,
    DependencyUnavailable,
    InvalidState,
    NotFound,
    ProjectMismatch,
    ValidationError,
)
from models.load import Load, LoadStatus, Skid, validate_skid_measurements
from models.project import ProjectStatus
from schemas.load import LoadCreate, LoadUpdate, SkidCreate
from services.audit_service import AuditService
from services.config_service import get_min_weight_capacity
from services.measurements import calculate_skid_weight, compute_space_utilization, format_weight, is_overweight
from services.project_service import ProjectService

log = logging.getLogger(__name__)


def actor_id_of(actor: Any) -> Optional[uuid.UUID]:
    actor_id = getattr(actor, "id", None)
    if actor_id is None or isinstance(actor_id, uuid.UUID):
        return actor_id
    return uuid.UUID(str(actor_id))


@contextmanager
def rollback_on_error(db: Session) -> Iterator[None]:
    """Discard pending changes when a mutation fails before its commit."""
    try:
        yield
    except Exception:
        db.rollback()
        raise


def build_skid(data: SkidCreate) -> Skid:
    """Validated skid from request data; a missing weight is estimated from the footprint."""
    weight = data.weight
    if weight is None:
        weight = calculate_skid_weight(data.width, data.length)
    width, length, weight = validate_skid_measurements(data.width, data.length, weight)
    return Skid(
        width=width,
        length=length,
        weight=weight,
        description=data.description,
    )


class LoadService:
    @staticmethod
    def commit(db: Session, load: Optional[Load] = None) -> None:
        """Write the pending unit of work, or nothing at all."""
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            log.warning("Concurrent update detected on load %s", getattr(load, "id", None))
            raise ConcurrentUpdate("The load was changed by another user. Reload it and try again.")
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Failed to persist load %s: %s", getattr(load, "id", None), exc, exc_info=True)
            raise DependencyUnavailable("Load storage is unavailable")
        if load is not None:
            db.refresh(load)

    @staticmethod
    def _parse_id(load_id: Union[str, uuid.UUID]) -> uuid.UUID:
        if isinstance(load_id, uuid.UUID):
            return load_id
        try:
            return uuid.UUID(str(load_id))
        except ValueError:
            raise ValidationError("Invalid load id format")

    @staticmethod
    def get_load(load_id: Union[str, uuid.UUID], db: Session) -> Load:
        try:
            load = db.query(Load).filter(Load.id == LoadService._parse_id(load_id)).first()
        except SQLAlchemyError as exc:
            log.error("Load lookup failed for %s: %s", load_id, exc, exc_info=True)
            raise DependencyUnavailable("Load storage is unavailable")
        if not load:
            raise NotFound("Load not found")
        return load

    @staticmethod
    def get_project_load(project_code: str, load_id: Union[str, uuid.UUID], db: Session) -> Load:
        load = LoadService.get_load(load_id, db)
        if load.project_code != project_code:
            raise ProjectMismatch(f"Load {load.truck_id} does not belong to project {project_code}")
        return load

    @staticmethod
    def find_inventory_load(project_code: str, db: Session) -> Optional[Load]:
        return db.query(Load).filter(
            Load.project_code == project_code,
            Load.is_inventory.is_(True)
        ).order_by(Load.date_entered.asc()).first()

    @staticmethod
    def list_loads(
        db: Session,
        project_code: Optional[str] = None,
        status: Optional[LoadStatus] = None,
        search: Optional[str] = None,
        include_inventory: bool = False,
        newest_first: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[int, List[Load]]:
        query = db.query(Load)
        if project_code:
            query = query.filter(Load.project_code == project_code)
        if status:
            query = query.filter(Load.status == status)
        if search:
            query = query.filter(Load.truck_id.ilike(f"%{search.strip()}%"))
        if not include_inventory:
            query = query.filter(Load.is_inventory.is_(False))

        total = query.count()
        order = Load.date_entered.desc() if newest_first else Load.date_entered.asc()
        return total, query.order_by(order).offset(offset).limit(limit).all()

    @staticmethod
    def create_load(data: LoadCreate, actor: Any, db: Session) -> Load:
        """Explicit load creation from the office side (truck details known up front)."""
        ProjectService.require_active_project(data.project_code, db)
        actor_id = actor_id_of(actor)

        with rollback_on_error(db):
            load = Load(
                id=uuid.uuid4(),
                project_code=data.project_code,
                status=LoadStatus.PLANNED,
                is_inventory=False,
                packing_list={},
                additional_projects=[],
                skid_sequence=0,
                created_by=actor_id,
            )
            load.set_truck_info(
                data.truck_id, data.length, data.width, data.weight_capacity,
                get_min_weight_capacity(), actor_id
            )
            db.add(load)
            AuditService.record_load_event(db, action="load.created", load=load, actor=actor)
            LoadService.commit(db, load)
        log.info("Created load %s (%s) for project %s", load.id, load.truck_id, load.project_code)
        return load

    @staticmethod
    def _reconcile_skids(load: Load, items: list, actor_id: Optional[uuid.UUID]) -> None:
        """Make the load carry exactly ``items``; listed ids that already exist are updated in place."""
        given_ids = [item.id for item in items if item.id]
        if len(given_ids) != len(set(given_ids)):
            raise ValidationError("Skid ids must be unique within a load")

        for skid in list(load.skids):
            if skid.id not in given_ids:
                load.remove_skid(skid.id, actor_id)

        for item in items:
            weight = item.weight
            if weight is None:
                weight = calculate_skid_weight(item.width, item.length)
            if item.id and load.find_skid(item.id) is not None:
                fields = {
                    "width": item.width,
                    "length": item.length,
                    "weight": weight,
                    "description": item.description,
                }
                if item.original_inv_id is not None:
                    fields["original_inv_id"] = item.original_inv_id
                if item.source_project is not None:
                    fields["source_project"] = item.source_project
                load.update_skid(item.id, fields, actor_id)
                continue

            skid = build_skid(item)
            skid.id = item.id
            skid.original_inv_id = item.original_inv_id
            skid.source_project = item.source_project
            load.add_skid(skid, actor_id)

    @staticmethod
    def update_load(load_id: Union[str, uuid.UUID], data: LoadUpdate, actor: Any, db: Session) -> Load:
        """Admin edit of a whole truck load: truck details, project, status, skids and packing list."""
        load = LoadService.get_load(load_id, db)
        if load.is_delivered:
            log.warning("Rejected edit of delivered load %s", load.id)
            raise InvalidState("Delivered loads cannot be edited")
        if load.is_inventory:
            raise InvalidState("Inventory is edited through inventory staging")
        project = ProjectService.get_project(data.project_code, db)
        actor_id = actor_id_of(actor)
        previous_status = load.status

        with rollback_on_error(db):
            load.set_truck_info(
                data.truck_id, data.length, data.width, data.weight_capacity,
                get_min_weight_capacity(), actor_id
            )
            if load.project_code != project.code:
                load.project_code = project.code
                load.additional_projects = [
                    code for code in (load.additional_projects or []) if code != project.code
                ]
            if data.skids is not None:
                LoadService._reconcile_skids(load, data.skids, actor_id)
            if data.packing_list is not None:
                load.merge_packing_list(data.packing_list.model_dump(exclude_unset=True), actor_id)
            if data.status is not None and data.status != load.status:
                load.force_status(data.status, actor_id)

            AuditService.record_load_event(
                db,
                action="load.updated",
                load=load,
                actor=actor,
                metadata={
                    "from": previous_status.value,
                    "to": load.status.value,
                    "skid_count": load.skid_count,
                    "total_weight": load.total_weight,
                },
            )
            LoadService.commit(db, load)
        log.info("Updated load %s (%s): %s skids, %s lbs", load.id, load.truck_id, load.skid_count, load.total_weight)
        return load

    @staticmethod
    def update_status(load_id: Union[str, uuid.UUID], status: LoadStatus, actor: Any, db: Session) -> Load:
        """Admin status override; bypasses the forward-only transition rules."""
        load = LoadService.get_load(load_id, db)
        previous = load.status
        with rollback_on_error(db):
            load.force_status(status, actor_id_of(actor))
            AuditService.record_load_event(
                db,
                action="load.status_override",
                load=load,
                actor=actor,
                level="WARN",
                metadata={"from": previous.value, "to": status.value},
            )
            LoadService.commit(db, load)
        log.info("Load %s status overridden %s -> %s", load.id, previous.value, status.value)
        return load

    @staticmethod
    def delete_load(load_id: Union[str, uuid.UUID], actor: Any, db: Session) -> None:
        load = LoadService.get_load(load_id, db)
        if load.is_delivered:
            raise InvalidState("Delivered loads cannot be deleted")

        truck_id = load.truck_id
        with rollback_on_error(db):
            AuditService.record_load_event(
                db,
                action="load.deleted",
                load=load,
                actor=actor,
                metadata={"skid_count": load.skid_count, "status": load.status.value},
            )
            db.delete(load)
            LoadService.commit(db)
        log.info("Deleted load %s (%s)", load_id, truck_id)

    @staticmethod
    def recent_projects(db: Session, limit: int = 10) -> List[dict]:
        """Active projects behind the most recently touched truck loads, newest first."""
        last_activity = func.coalesce(Load.updated_at, Load.date_entered)
        loads = db.query(Load).filter(
            Load.is_inventory.is_(False)
        ).order_by(last_activity.desc()).limit(limit).all()

        recent: List[dict] = []
        seen = set()
        for load in loads:
            if load.project_code in seen:
                continue
            seen.add(load.project_code)
            project = ProjectService.find_project(load.project_code, db)
            if project is None or project.status != ProjectStatus.ACTIVE:
                continue
            recent.append({
                "code": project.code,
                "name": project.name,
                "last_activity": load.updated_at or load.date_entered,
            })
        return recent

    @staticmethod
    def loader_stats(db: Session, now: Optional[datetime] = None) -> dict:
        """Dashboard counters. Weeks start on Sunday; times are UTC."""
        now = now or datetime.utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_week = start_of_day - timedelta(days=(now.weekday() + 1) % 7)

        trucks = db.query(Load).filter(Load.is_inventory.is_(False))
        skids_added = db.query(func.coalesce(func.sum(Load.skid_count), 0)).filter(
            Load.date_entered >= start_of_week
        ).scalar()
        return {
            "planned_loads": trucks.filter(Load.status == LoadStatus.PLANNED).count(),
            "loaded_today": trucks.filter(
                Load.status == LoadStatus.LOADED, Load.updated_at >= start_of_day
            ).count(),
            "delivered_week": trucks.filter(
                Load.status == LoadStatus.DELIVERED, Load.updated_at >= start_of_week
            ).count(),
            "skids_added": int(skids_added or 0),
        }

    @staticmethod
    def build_summary(load: Load, db: Session) -> dict:
        """Data behind the printable load sheet."""
        project = ProjectService.find_project(load.project_code, db)
        return {
            "load": load,
            "project_name": project.name if project else None,
            "space_utilization": compute_space_utilization(load),
            "is_overweight": is_overweight(load),
            "formatted_total_weight": format_weight(load.total_weight),
            "formatted_date": load.date_entered.strftime("%Y-%m-%d %H:%M") if load.date_entered else "",
        }
