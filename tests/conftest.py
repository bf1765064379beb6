"""
Test configuration and fixtures for sitecms tests.
"""
import os
import tempfile
from pathlib import Path

# Settings are read at import time; keep the default database and upload
# root out of the repository before anything from sitecms is imported.
# Tests that exercise the upload limit lower it themselves.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="sitecms-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_ROOT / 'default.db'}")
os.environ.setdefault("UPLOAD_DIR", str(_TEST_ROOT / "uploads"))
os.environ.setdefault("RATE_LIMIT_UPLOADS", "1000/hour")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from sitecms.main import app
from sitecms.config import settings
from sitecms.db.database import get_db, make_engine
from sitecms.db.init_db import create_tables
from sitecms.db.models import MODELS
from sitecms.db.repositories.entities import EntityRepository
from sitecms.dependencies import get_asset_storage
from sitecms.domain.events import event_publisher
from sitecms.domain.resources import get_resource
from sitecms.storage.filesystem import FilesystemStorage
from sitecms.uploads.form_parser import UploadedFile
from sitecms.application.event_handlers import register_event_handlers
from sitecms.rate_limit import limiter

ADMIN_TOKEN = "test-admin-token"

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


def make_upload(filename="photo.png", content_type="image/png", data=PNG_BYTES, field_name="images"):
    """Build an UploadedFile as the form parser would."""
    return UploadedFile(field_name=field_name, filename=filename, content_type=content_type, data=data)


@pytest.fixture(autouse=True)
def reset_event_subscribers():
    """Every test starts and ends without event subscribers."""
    event_publisher.clear_subscribers()
    yield
    event_publisher.clear_subscribers()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Request counters never carry over between tests."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def db_engine(tmp_path):
    """Engine on a fresh SQLite file with all tables created."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_storage(tmp_path):
    """Filesystem storage rooted in the test's temp directory."""
    return FilesystemStorage(base_dir=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def repository_factory(db_session):
    """Return a function building the repository of a resource."""
    def factory(resource):
        return EntityRepository(db_session, MODELS[resource], get_resource(resource))
    return factory


@pytest.fixture
def admin_token(monkeypatch):
    """Accept a single known admin token for the duration of the test."""
    monkeypatch.setattr(settings, "ADMIN_TOKENS", [ADMIN_TOKEN])
    return ADMIN_TOKEN


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def client(db_engine, upload_storage, admin_token):
    """TestClient wired to the temp database and upload directory."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_storage] = lambda: upload_storage
    register_event_handlers()

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def upload_factory():
    """Return a function building parsed uploads."""
    return make_upload


@pytest.fixture
def image_file():
    """Return a function building a multipart image part for TestClient."""
    def build(filename="photo.png"):
        return (filename, PNG_BYTES, "image/png")
    return build
