"""
Pytest configuration and shared fixtures.

Every test gets its own SQLite file database; the Flask fixtures add a
temporary Flask-Session directory and an in-memory blob store. No network.
"""
import pytest

from command_center.db.enums import MilestoneStatus, ProjectCategory, ProjectStatus
from command_center.db.init_db import init_db
from command_center.db.session import configure_engine, get_session
from command_center.errors import BackendError, ErrorType
from command_center.schemas.project import Milestones, Project, PunchListItem
from command_center.schemas.results import ActionResult
from command_center.services.auth_service import hash_password
from command_center.services.backend import SqlBackend
from command_center.services.blob_store import BlobStore
from command_center.services.change_log_service import ChangeLogService
from command_center.services.project_service import ProjectService
from command_center.services.state import DashboardState

TEST_EMAIL = "ops@macproducts.net"
TEST_PASSWORD = "substation-2026"


# =============================================================================
# Test doubles
# =============================================================================

class MemoryBlobStore(BlobStore):
    """Blob store kept in a dict; deletes can be made to fail."""

    def __init__(self):
        self.files = {}
        self.fail_delete = False
        self.uploads = 0

    def upload(self, path, data, content_type):
        self.uploads += 1
        if path in self.files:
            return ActionResult.failure(ErrorType.BLOB_STORE_ERROR, "The resource already exists")
        self.files[path] = data
        return ActionResult(ok=True, data={"url": f"/attachments/{path}", "path": path})

    def delete(self, path):
        if self.fail_delete:
            return ActionResult.failure(ErrorType.BLOB_STORE_ERROR, "Delete rejected")
        self.files.pop(path, None)
        return ActionResult(ok=True)


class FlakyBackend(SqlBackend):
    """SqlBackend whose writes can be switched to fail."""

    def __init__(self, db):
        super().__init__(db)
        self.fail_update = False
        self.fail_log = False
        self.updates = []

    def update_project(self, project_id, row):
        self.updates.append((project_id, row))
        if self.fail_update:
            raise BackendError(f"Updating project {project_id} failed: offline")
        super().update_project(project_id, row)

    def insert_change_log(self, row):
        if self.fail_log:
            raise BackendError("Inserting change log entry failed: offline")
        return super().insert_change_log(row)


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def db_session(db_url):
    """Fresh database with both tables."""
    configure_engine(db_url)
    init_db()
    session = get_session()
    yield session
    session.close()
    configure_engine(db_url)


@pytest.fixture
def backend(db_session):
    return FlakyBackend(db_session)


@pytest.fixture
def state(backend):
    return DashboardState.open(TEST_EMAIL, backend)


@pytest.fixture
def change_log(backend, state):
    return ChangeLogService(backend, state)


@pytest.fixture
def project_service(backend, state, change_log):
    return ProjectService(backend, state, change_log)


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


# =============================================================================
# Model factories
# =============================================================================

def make_project(**overrides) -> Project:
    data = dict(
        id=1,
        category=ProjectCategory.PUMPING,
        utility="Duke Energy",
        substation="Riverside",
        date_created="1/5/2026",
        order="24-1001",
        fat_date="N/A",
        landing="TBD",
        status=ProjectStatus.ACTIVE,
        progress=10,
        lead="TBD",
    )
    data.update(overrides)
    return Project(**data)


def fat_done(**stages) -> Milestones:
    return Milestones(fat=MilestoneStatus.COMPLETED, **stages)


def item(item_id: str, description: str = "Replace gasket", completed: bool = False) -> PunchListItem:
    return PunchListItem(id=item_id, description=description, completed=completed)


# =============================================================================
# Application fixtures
# =============================================================================

@pytest.fixture(scope="session")
def password_hash():
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def app(tmp_path, db_url, password_hash):
    from command_center.app_factory import create_app

    app = create_app({
        "TESTING": True,
        "DATABASE_URL": db_url,
        "SECRET_KEY": "test-secret",
        "SESSION_FILE_DIR": str(tmp_path / "flask_session"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "AUTH_MODE": "password",
        "LOGIN_EMAIL": TEST_EMAIL,
        "LOGIN_PASSWORD_HASH": password_hash,
        "SEED_FILE": "",
    })
    init_db()
    app.extensions["blob_store"] = MemoryBlobStore()
    yield app
    configure_engine(db_url)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """Test client already signed in."""
    response = client.post("/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert response.status_code == 200
    return client
