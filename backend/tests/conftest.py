"""
Pytest configuration and fixtures for StatusMaker tests.
"""
import os

# Point the app at the test database before anything reads settings
os.environ["DATABASE_URL"] = "sqlite:///./test_statusmaker.db"
os.environ["SEED_DEFAULTS"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from statusmaker.core.auth import create_access_token, hash_password  # noqa: E402
from statusmaker.core.config import settings  # noqa: E402
from statusmaker.core.database import Base, get_db  # noqa: E402
from statusmaker.main import app  # noqa: E402
from statusmaker.models import Admin, AdminRole, Template  # noqa: E402


# Test database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test_statusmaker.db"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with the test database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep stored files inside the test's temp directory"""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


def _make_admin(db_session, email, role=AdminRole.ADMIN.value, permissions=None, is_active=True):
    admin = Admin(
        name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password(ADMIN_PASSWORD),
        role=role,
        permissions=permissions or [],
        is_active=is_active,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def make_admin(db_session):
    """Factory: make_admin(email, role=..., permissions=[...], is_active=True)"""
    def factory(email, **kwargs):
        return _make_admin(db_session, email, **kwargs)
    return factory


@pytest.fixture
def super_admin(db_session):
    return _make_admin(db_session, "root@statusmaker.dev", role=AdminRole.SUPER_ADMIN.value)


@pytest.fixture
def auth_headers(super_admin):
    """Bearer headers for a super admin (every permission)"""
    return {"Authorization": f"Bearer {create_access_token(super_admin.id)}"}


def headers_for(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}


@pytest.fixture
def sample_layout():
    """
    Layout with a text, an image and an audio layer.
    Keys: text_0, image_1, audio_2.
    """
    return {
        "version": "1.0",
        "objects": [
            {
                "type": "text",
                "content": "{{name}}",
                "fontSize": 48,
                "fontFamily": "Arial",
                "color": "#FFFFFF",
                "textAlign": "center",
                "x": 0,
                "y": 0,
                "width": 100,
                "height": 50
            },
            {
                "type": "image",
                "src": "https://cdn.example.com/frame.png",
                "size": {"width": 320, "height": 240},
                "position": {"x": 10, "y": 20}
            },
            {
                "type": "audio",
                "src": "https://cdn.example.com/track.mp3",
                "volume": 0.8
            }
        ],
        "background": {"type": "color", "color": "#000000"}
    }


@pytest.fixture
def make_template(db_session, super_admin, sample_layout):
    """Factory inserting a template row directly (bypasses the API)"""
    counter = {"n": 0}

    def factory(name=None, status="published", category="general", layout=None, **kwargs):
        counter["n"] += 1
        name = name or f"Template {counter['n']}"
        template = Template(
            name=name,
            slug=kwargs.pop("slug", name.lower().replace(" ", "-")),
            layout=layout or sample_layout,
            category=category,
            status=status,
            created_by=super_admin.id,
            tags=kwargs.pop("tags", []),
            **kwargs
        )
        db_session.add(template)
        db_session.commit()
        db_session.refresh(template)
        return template

    return factory
