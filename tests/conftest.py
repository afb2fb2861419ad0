import os
from dataclasses import dataclass

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BEDROCK_LLM_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobautoflow.core.rate_limiter import rate_limiter
from jobautoflow.database import Base, get_db, _import_models
from jobautoflow.dependencies import get_current_admin, get_current_user
from jobautoflow.main import app


@dataclass
class StubUser:
    id: str = "user-1"
    email: str = "user@example.com"
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool = False
    is_active: bool = True
    password_hash: str = "hashed-password"


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def stub_user() -> StubUser:
    return StubUser()


@pytest.fixture
def admin_user() -> StubUser:
    return StubUser(id="admin-1", email="admin@example.com", is_admin=True)


@pytest.fixture
def client(stub_user: StubUser):
    def _db_override():
        yield object()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_current_user] = lambda: stub_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(admin_user: StubUser):
    def _db_override():
        yield object()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_current_user] = lambda: admin_user
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Fresh in-memory SQLite session with all tables."""
    _import_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
