import os

# settings are read at import time; give the app something to start with
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

# FORCE model registration
import gigboard.models  # noqa

from gigboard.core.rate_limit import BID_POST_LIMITER
from gigboard.db.base import Base
from gigboard.db.session import build_engine, get_db
from gigboard.main import app
from gigboard.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)


class RecordingNotifier:
    """Stands in for the socket registry; keeps what would have been pushed."""

    def __init__(self):
        self.sent = []

    async def notify(self, identity, payload):
        self.sent.append((identity, payload))

    def events(self, name):
        return [(who, p) for who, p in self.sent if p.get("event") == name]


@pytest.fixture(scope="function")
def engine(tmp_path):
    # a file, not :memory:, so threads get their own connections to one database
    eng = build_engine(f"sqlite:///{tmp_path / 'gigboard.db'}")
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def fresh(session_factory):
    """Opens sessions that see everything committed so far."""
    opened = []

    def _open():
        s = session_factory()
        opened.append(s)
        return s

    yield _open
    for s in opened:
        s.close()


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(session_factory, notifier):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: NotificationDispatcher(notifier)
    BID_POST_LIMITER.reset()
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        BID_POST_LIMITER.reset()
