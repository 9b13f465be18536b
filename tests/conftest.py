import os
import sys
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


@compiles(PG_UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kwargs):
    return "CHAR(36)"


from main import app  # noqa: E402
from core.database import Base, get_db  # noqa: E402
from core.security import get_current_user  # noqa: E402
from models.project import Project, ProjectStatus  # noqa: E402
from services import config_service  # noqa: E402

ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


class MockUser:
    def __init__(self, role: str, user_id: uuid.UUID = ADMIN_ID) -> None:
        self.id = user_id
        self.role = role
        self.email = f"{role.lower()}@example.com"
        self.username = f"{role.lower()}-user"
        self.is_active = True
        self.last_login = None


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        config_service.clear_overrides()


@pytest.fixture
def admin():
    return MockUser("ADMIN")


@pytest.fixture
def loader():
    return MockUser("LOADER", uuid.UUID("00000000-0000-0000-0000-000000000002"))


@pytest.fixture
def make_project(db_session):
    def _make(code: str = "P-100", name: str = "North Yard", status: ProjectStatus = ProjectStatus.ACTIVE) -> Project:
        project = Project(
            id=uuid.uuid4(),
            code=code,
            name=name,
            address="12 Quay Street",
            status=status
        )
        db_session.add(project)
        db_session.commit()
        return project

    return _make


@pytest.fixture
def project(make_project):
    return make_project()


@pytest.fixture(scope="function")
def client_for(db_session):
    """TestClient factory acting as a user with the given role."""
    clients = []

    def _override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    def _make(role: str = "ADMIN") -> TestClient:
        app.dependency_overrides[get_db] = _override_get_db
        app.dependency_overrides[get_current_user] = lambda: MockUser(role)
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(client_for):
    return client_for("ADMIN")
