# tests/conftest.py
import os

# Must be set before the app's config module is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from servicedesk.backend.app.auth import get_password_hash
from servicedesk.backend.app.db import Base
from servicedesk.backend.app.models import Priority, Role, ServiceRequest, Status, User
from servicedesk.backend.app.schemas.common import Performer
from servicedesk.backend.app.seed import seed_statuses

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = Session()
    seed_statuses(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


_PASSWORD_HASH = get_password_hash("password123")


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: Role = Role.USER, active: bool = True, first_name: str = None, **kwargs) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            first_name=first_name or f"{role.value}{n}",
            last_name=kwargs.pop("last_name", "Tester"),
            email=kwargs.pop("email", f"user{n}@example.com"),
            password_hash=_PASSWORD_HASH,
            role=role,
            is_active=active,
            created_at=kwargs.pop("created_at", NOW - timedelta(days=30) + timedelta(minutes=n)),
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_request(db):
    def _make(
        creator: User,
        status: Status = Status.OPEN,
        technician: User = None,
        priority: Priority = Priority.NORMAL,
        created_at: datetime = None,
        updated_at: datetime = None,
        title: str = "Printer on floor 3 is jammed",
        description: str = "Paper stuck in tray 2",
    ) -> ServiceRequest:
        request = ServiceRequest(
            title=title,
            description=description,
            priority=int(priority),
            status_id=int(status),
            created_by_id=creator.id,
            technician_id=technician.id if technician is not None else None,
            created_at=created_at or NOW - timedelta(days=3),
            updated_at=updated_at,
        )
        db.add(request)
        db.commit()
        return request

    return _make


def as_performer(user: User) -> Performer:
    return Performer(id=user.id, role=user.role)


def reload(db, model, pk):
    db.expire_all()
    return db.get(model, pk)
