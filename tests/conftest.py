"""
Pytest fixtures for Coin Flip tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import Base, create_db_engine, get_db
import models  # noqa: F401
from core.engine import TransitionEngine
from core.event_sink import InMemoryEventSink
from core.record_store import InMemoryRecordStore
from main import app


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def sink():
    return InMemoryEventSink()


@pytest.fixture
def make_engine(store, sink):
    """Build a TransitionEngine over the in-memory fakes with scripted entropy."""
    def _make(entropy_source):
        return TransitionEngine(store=store, sink=sink, entropy_source=entropy_source)
    return _make


@pytest.fixture
def client(db_engine):
    """TestClient bound to the per-test database."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
