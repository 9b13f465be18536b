import pytest

from core.exceptions import NotFound, ValidationError
from models.audit_log import AuditLog
from models.load import Load
from models.project import ProjectStatus
from schemas.load import SkidCreate, SkidUpdate
from services.inventory_service import InventoryService


def test_get_or_create_inventory_is_idempotent(db_session, project, loader):
    first = InventoryService.get_or_create_inventory(project.code, loader, db_session)
    second = InventoryService.get_or_create_inventory(project.code, loader, db_session)

    assert first.id == second.id
    assert first.is_inventory is True
    assert first.truck_id == f"INVENTORY-{project.code}"
    assert db_session.query(Load).filter(Load.is_inventory.is_(True)).count() == 1


def test_get_inventory_is_read_only(db_session, project):
    assert InventoryService.get_inventory(project.code, db_session) is None
    assert db_session.query(Load).count() == 0


def test_inventory_requires_active_project(db_session, make_project, loader):
    make_project(code="OLD-1", status=ProjectStatus.INACTIVE)
    with pytest.raises(NotFound):
        InventoryService.get_or_create_inventory("OLD-1", loader, db_session)
    with pytest.raises(NotFound):
        InventoryService.get_or_create_inventory("MISSING", loader, db_session)


def test_add_inventory_skid_creates_inventory_and_numbers_skids(db_session, project, loader):
    first = InventoryService.add_inventory_skid(project.code, SkidCreate(width=4, length=4), loader, db_session)
    second = InventoryService.add_inventory_skid(
        project.code, SkidCreate(width=2, length=2, weight=150, description="Pipe bundle"), loader, db_session
    )

    assert first.id == "INV-P-100-1"
    assert first.weight == 320.0
    assert second.id == "INV-P-100-2"

    inventory = InventoryService.get_inventory(project.code, db_session)
    assert inventory.skid_count == 2
    assert inventory.total_weight == 470.0


def test_add_inventory_skid_rejects_bad_measurements(db_session, project, loader):
    with pytest.raises(ValidationError):
        InventoryService.add_inventory_skid(project.code, SkidCreate(width=4, length=4, weight=0), loader, db_session)
    with pytest.raises(ValidationError):
        InventoryService.add_inventory_skid(project.code, SkidCreate(width=0, length=4), loader, db_session)


def test_rejected_first_skid_leaves_no_inventory_behind(db_session, project, loader):
    with pytest.raises(ValidationError):
        InventoryService.add_inventory_skid(
            project.code, SkidCreate(width=0, length=4, weight=10), loader, db_session
        )

    # A later commit on the same session must not write a half-built inventory load.
    db_session.commit()
    assert db_session.query(Load).filter(Load.is_inventory.is_(True)).count() == 0

    skid = InventoryService.add_inventory_skid(project.code, SkidCreate(width=2, length=2, weight=10), loader, db_session)
    assert skid.id == "INV-P-100-1"


def test_update_inventory_skid_recomputes_totals(db_session, project, loader):
    skid = InventoryService.add_inventory_skid(project.code, SkidCreate(width=4, length=4), loader, db_session)

    updated = InventoryService.update_inventory_skid(
        project.code, skid.id, SkidUpdate(weight=500, source_project="P-999"), loader, db_session
    )

    assert updated.weight == 500
    assert updated.source_project is None
    assert InventoryService.get_inventory(project.code, db_session).total_weight == 500


def test_delete_inventory_skid(db_session, project, loader):
    skid = InventoryService.add_inventory_skid(project.code, SkidCreate(width=4, length=4), loader, db_session)

    inventory = InventoryService.delete_inventory_skid(project.code, skid.id, loader, db_session)

    assert inventory.skid_count == 0
    with pytest.raises(NotFound):
        InventoryService.delete_inventory_skid(project.code, skid.id, loader, db_session)


def test_update_without_inventory_is_not_found(db_session, project, loader):
    with pytest.raises(NotFound):
        InventoryService.update_inventory_skid(project.code, "INV-P-100-1", SkidUpdate(weight=1), loader, db_session)


def test_clear_inventory_removes_all_skids_and_audits(db_session, project, loader):
    for _ in range(3):
        InventoryService.add_inventory_skid(project.code, SkidCreate(width=1, length=1, weight=10), loader, db_session)

    removed = InventoryService.clear_inventory(project.code, loader, db_session)

    inventory = InventoryService.get_inventory(project.code, db_session)
    assert removed == 3
    assert inventory.skids == []
    assert inventory.total_weight == 0
    entry = db_session.query(AuditLog).filter(AuditLog.action == "inventory.cleared").one()
    assert entry.category == "inventory"
    assert entry.metadata_dict == {"removed": 3}


def test_clearing_empty_or_missing_inventory_is_a_no_op(db_session, project, loader):
    assert InventoryService.clear_inventory(project.code, loader, db_session) == 0

    InventoryService.get_or_create_inventory(project.code, loader, db_session)
    assert InventoryService.clear_inventory(project.code, loader, db_session) == 0
    assert db_session.query(AuditLog).count() == 0
