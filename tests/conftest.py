"""
Pytest configuration and fixtures: in-memory SQLite db, app client, admin auth
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import build_session_factory
from app.main import create_app
from app import models
from app.services.admin import create_admin
from app.services.uploads import PdfUploadGate

ADMIN_EMAIL = "chef@markt-beispiel.de"
ADMIN_PASSWORD = "Geheim1234."


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def upload_gate(tmp_path):
    return PdfUploadGate(str(tmp_path / "uploads"))


@pytest.fixture()
def client(session_factory, upload_gate):
    app = create_app(session_factory=session_factory, upload_gate=upload_gate)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def superadmin(db) -> models.Admin:
    return create_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD, "Chef")


@pytest.fixture()
def regular_admin(db) -> models.Admin:
    admin = models.Admin(email="kasse@markt-beispiel.de", first_name="Kasse", password_hash="x", role="admin")
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def auth_headers(admin: models.Admin) -> dict:
    token = create_access_token(subject=str(admin.id), role=admin.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers(superadmin):
    return auth_headers(superadmin)


@pytest.fixture()
def make_auth_headers():
    return auth_headers
