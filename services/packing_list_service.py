"""
Packing list capture and the signature-driven status transitions.

Signing the list marks the truck Loaded; signing with a receiver name marks it
Delivered. Removing a signature never moves a load backward.
"""
import logging
import uuid
from datetime import date
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from core.exceptions import InvalidState
from models.load import PACKING_LIST_FIELDS, Load, LoadStatus
from services.audit_service import AuditService
from services.load_service import LoadService, actor_id_of, rollback_on_error
from services.project_service import ProjectService
from services.truck_load_service import TruckLoadService

log = logging.getLogger(__name__)

EMPTY_SIGNATURES = ("", "data:,")


def has_signature(signature: Optional[str]) -> bool:
    return signature is not None and signature.strip() not in EMPTY_SIGNATURES


def _target_status(updates: dict, merged: dict) -> Optional[LoadStatus]:
    """
    Status implied by one save. A receiver name only delivers the load when it
    arrives in the same save as a signature, or joins a signature stored earlier;
    a receiver stored earlier does not turn a later signature into a delivery.
    """
    receiver_now = bool((updates.get("received_by") or "").strip())
    if has_signature(updates.get("signature")):
        return LoadStatus.DELIVERED if receiver_now else LoadStatus.LOADED
    if receiver_now and has_signature(merged.get("signature")):
        return LoadStatus.DELIVERED
    return None


class PackingListService:
    @staticmethod
    def get_packing_list(project_code: str, load_id: Union[str, uuid.UUID], db: Session) -> dict:
        load = TruckLoadService.get_truck_load(project_code, load_id, db)
        project = ProjectService.find_project(load.project_code, db)

        fields = {name: None for name in PACKING_LIST_FIELDS}
        fields["date"] = date.today().isoformat()
        if project:
            fields["project_name"] = project.name
            fields["project_address"] = project.address
        fields.update({key: value for key, value in (load.packing_list or {}).items() if value not in (None, "")})

        return {
            "load": load,
            "fields": fields,
            "is_signed": has_signature(fields.get("signature")),
        }

    @staticmethod
    def save_packing_list(
        project_code: str,
        load_id: Union[str, uuid.UUID],
        fields: dict,
        signature: Optional[str],
        actor: Any,
        db: Session,
        confirm_delivery: bool = False
    ) -> Load:
        load = TruckLoadService.get_truck_load(project_code, load_id, db)
        if load.is_delivered and not confirm_delivery:
            log.warning("Packing list edit on delivered load %s without confirmation", load.id)
            raise InvalidState(
                f"Load {load.truck_id} is already Delivered. Confirm to edit its packing list."
            )

        updates = {key: value for key, value in fields.items() if key in PACKING_LIST_FIELDS and key != "signature"}
        if has_signature(signature):
            updates["signature"] = signature

        actor_id = actor_id_of(actor)
        previous = load.status
        with rollback_on_error(db):
            merged = load.merge_packing_list(updates, actor_id)
            target = _target_status(updates, merged)
            if target is not None and not load.is_delivered:
                load.transition_to(target, actor_id)

            AuditService.record_load_event(
                db,
                action="load.packing_list_saved",
                load=load,
                actor=actor,
                metadata={"fields": sorted(updates.keys())},
            )
            if load.status != previous:
                AuditService.record_load_event(
                    db,
                    action="load.status_changed",
                    load=load,
                    actor=actor,
                    metadata={"from": previous.value, "to": load.status.value},
                )
            LoadService.commit(db, load)

        if load.status != previous:
            log.info("Load %s moved %s -> %s on packing list save", load.id, previous.value, load.status.value)
        return load
