import os
import tempfile
from datetime import date

# The app module builds its engine at import time; point it at a throwaway
# SQLite file so the startup schema bootstrap never needs a PostgreSQL server.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="slotwise-tests-")
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{_TEST_DB_DIR}/app.db"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.config import Settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.services.scheduling import ValidationGateway  # noqa: E402

# Fixed clock for service-level tests so "2024-2025" stays a valid academic year.
GATEWAY_TODAY = date(2024, 9, 1)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateway(db):
    return ValidationGateway(db, settings=Settings(), today=GATEWAY_TODAY)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
