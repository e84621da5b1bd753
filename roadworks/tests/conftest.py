import os

# Settings are read on first import of roadworks.db.session
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

# FORCE model registration
import roadworks.models  # noqa

from roadworks.core.clock import MonotonicClock
from roadworks.db.base import Base
from roadworks.db.session import get_db, make_engine
from roadworks.services.activity_store import ActivityStore, get_activity_store


@pytest.fixture(scope="function")
def session_factory():
    engine = make_engine("sqlite+pysqlite://")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def store():
    return ActivityStore(MonotonicClock())


@pytest.fixture(scope="function")
def client(session_factory, store):
    from roadworks.main import create_app

    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_activity_store] = lambda: store
    return TestClient(app)
