import pytest

from core.exceptions import InvalidState, NotFound, ValidationError
from models.project import ProjectStatus
from schemas.project import ProjectCreate, ProjectUpdate
from services.inventory_service import InventoryService
from services.project_service import ProjectService
from services.truck_load_service import TruckLoadService


def test_create_and_find_project(db_session, admin):
    created = ProjectService.create_project(
        ProjectCreate(code=" P-500 ", name="Harbour Works", address="3 Pier Road"), db_session, admin.id
    )
    assert created.code == "P-500"
    assert created.created_by == admin.id
    assert ProjectService.get_project("P-500", db_session).name == "Harbour Works"


def test_duplicate_project_code_is_rejected(db_session, project, admin):
    with pytest.raises(ValidationError):
        ProjectService.create_project(ProjectCreate(code=project.code, name="Again"), db_session, admin.id)


def test_inactive_project_fails_active_check(db_session, project):
    ProjectService.update_project(project.code, ProjectUpdate(status=ProjectStatus.INACTIVE), db_session)
    with pytest.raises(NotFound) as exc:
        ProjectService.require_active_project(project.code, db_session)
    assert "not found or inactive" in exc.value.detail


def test_list_projects_filters(db_session, make_project):
    make_project(code="A-1", name="Alpha")
    make_project(code="B-1", name="Bravo", status=ProjectStatus.INACTIVE)

    assert [p.code for p in ProjectService.list_projects(db_session)] == ["A-1", "B-1"]
    assert [p.code for p in ProjectService.list_projects(db_session, status=ProjectStatus.ACTIVE)] == ["A-1"]
    assert [p.code for p in ProjectService.list_projects(db_session, search="brav")] == ["B-1"]


def test_delete_refused_while_loads_exist(db_session, project, loader):
    InventoryService.get_or_create_inventory(project.code, loader, db_session)
    TruckLoadService.start_or_resume_truck_load(project.code, loader, db_session)

    assert ProjectService.count_loads(project.code, db_session) == 2
    assert ProjectService.count_loads(project.code, db_session, include_inventory=False) == 1
    with pytest.raises(InvalidState) as exc:
        ProjectService.delete_project(project.code, db_session)
    assert "2 associated load(s)" in exc.value.detail


def test_delete_project_without_loads(db_session, project):
    ProjectService.delete_project(project.code, db_session)
    assert ProjectService.find_project(project.code, db_session) is None
