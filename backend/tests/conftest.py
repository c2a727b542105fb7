"""Shared fixtures: in-memory database, services and API client"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, init_db
from app.main import app
from app.models.room import Room, RoomMembership
from app.services.queue_service import QueueService
from app.services.session_service import SessionService
from app.services.vote_service import VoteService

from helpers import HOST


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def session_service(db):
    return SessionService(db)


@pytest.fixture
def queue_service(db):
    return QueueService(db)


@pytest.fixture
def vote_service(db):
    return VoteService(db)


@pytest.fixture
def room(db):
    """A public room created by the host"""
    room = Room(name="Late Night House", created_by_id=HOST)
    db.add(room)
    db.flush()
    db.add(RoomMembership(room_id=room.id, user_id=HOST))
    db.commit()
    return room


@pytest.fixture
def client(session_factory):
    """API client bound to the test database (lifespan is not run)"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
