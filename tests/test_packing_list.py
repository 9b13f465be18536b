import pytest

from core.exceptions import InvalidState
from models.audit_log import AuditLog
from models.load import LoadStatus
from services.inventory_service import InventoryService
from services.packing_list_service import PackingListService, has_signature
from services.truck_load_service import TruckLoadService

SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"


@pytest.fixture
def truck(db_session, project, loader):
    return TruckLoadService.start_or_resume_truck_load(project.code, loader, db_session)


def test_blank_signatures_count_as_absent():
    assert has_signature(None) is False
    assert has_signature("") is False
    assert has_signature("data:,") is False
    assert has_signature(SIGNATURE) is True


def test_packing_list_defaults_come_from_project(db_session, truck, project):
    view = PackingListService.get_packing_list(project.code, truck.id, db_session)

    assert view["fields"]["project_name"] == project.name
    assert view["fields"]["project_address"] == project.address
    assert view["fields"]["date"]
    assert view["is_signed"] is False


def test_saving_without_signature_keeps_planned(db_session, truck, project, loader):
    load = PackingListService.save_packing_list(
        project.code, truck.id, {"carrier": "Acme Haulage", "work_order": "WO-9"}, None, loader, db_session
    )
    assert load.status == LoadStatus.PLANNED
    assert load.packing_list["carrier"] == "Acme Haulage"


def test_signature_moves_planned_to_loaded_then_delivered(db_session, truck, project, loader):
    loaded = PackingListService.save_packing_list(
        project.code, truck.id, {"packaged_by": "Sam"}, SIGNATURE, loader, db_session
    )
    assert loaded.status == LoadStatus.LOADED

    delivered = PackingListService.save_packing_list(
        project.code, truck.id, {"received_by": "Alex at site"}, None, loader, db_session
    )
    assert delivered.status == LoadStatus.DELIVERED
    # Earlier fields survive partial saves
    assert delivered.packing_list["packaged_by"] == "Sam"
    assert delivered.packing_list["signature"] == SIGNATURE

    actions = [row.action for row in db_session.query(AuditLog).order_by(AuditLog.event_time).all()]
    assert actions.count("load.status_changed") == 2


def test_signature_with_receiver_delivers_directly(db_session, truck, project, loader):
    load = PackingListService.save_packing_list(
        project.code, truck.id, {"received_by": "Alex"}, SIGNATURE, loader, db_session
    )
    assert load.status == LoadStatus.DELIVERED


def test_stored_receiver_does_not_deliver_a_later_signature(db_session, truck, project, loader):
    planned = PackingListService.save_packing_list(
        project.code, truck.id, {"received_by": "Bob"}, None, loader, db_session
    )
    assert planned.status == LoadStatus.PLANNED

    load = PackingListService.save_packing_list(project.code, truck.id, {}, SIGNATURE, loader, db_session)

    assert load.status == LoadStatus.LOADED
    assert load.packing_list["received_by"] == "Bob"


def test_receiver_added_after_signing_delivers(db_session, truck, project, loader):
    PackingListService.save_packing_list(project.code, truck.id, {}, SIGNATURE, loader, db_session)

    unchanged = PackingListService.save_packing_list(
        project.code, truck.id, {"carrier": "Acme Haulage"}, None, loader, db_session
    )
    assert unchanged.status == LoadStatus.LOADED

    load = PackingListService.save_packing_list(
        project.code, truck.id, {"received_by": "Bob"}, None, loader, db_session
    )
    assert load.status == LoadStatus.DELIVERED


def test_blank_signature_does_not_clear_or_revert(db_session, truck, project, loader):
    PackingListService.save_packing_list(project.code, truck.id, {}, SIGNATURE, loader, db_session)

    load = PackingListService.save_packing_list(project.code, truck.id, {"carrier": "Other"}, "data:,", loader, db_session)

    assert load.status == LoadStatus.LOADED
    assert load.packing_list["signature"] == SIGNATURE


def test_delivered_load_requires_confirmation(db_session, truck, project, loader):
    PackingListService.save_packing_list(project.code, truck.id, {"received_by": "Alex"}, SIGNATURE, loader, db_session)

    with pytest.raises(InvalidState):
        PackingListService.save_packing_list(project.code, truck.id, {"carrier": "Late"}, None, loader, db_session)

    load = PackingListService.save_packing_list(
        project.code, truck.id, {"carrier": "Late", "received_by": ""}, None, loader, db_session, confirm_delivery=True
    )
    assert load.status == LoadStatus.DELIVERED
    assert load.packing_list["carrier"] == "Late"


def test_inventory_has_no_packing_list(db_session, project, loader):
    inventory = InventoryService.get_or_create_inventory(project.code, loader, db_session)
    with pytest.raises(InvalidState):
        PackingListService.save_packing_list(project.code, inventory.id, {}, SIGNATURE, loader, db_session)
