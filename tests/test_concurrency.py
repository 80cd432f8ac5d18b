# tests/test_concurrency.py
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from servicedesk.backend.app.db import unit_of_work
from servicedesk.backend.app.errors import ConflictError
from servicedesk.backend.app.models import RequestHistory, Role, ServiceRequest, Status, User
from servicedesk.backend.app.services.workflow import Rejection, WorkflowEngine

from conftest import FixedClock, as_performer, reload


class RacingClock(FixedClock):
    """Runs another writer the first time the engine reads the time."""

    def __init__(self, race):
        super().__init__()
        self.race = race

    def __call__(self):
        if self.race is not None:
            race, self.race = self.race, None
            race()
        return self.now


@pytest.fixture
def other_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    sessions = []

    def _open():
        session = Session()
        sessions.append(session)
        return session

    yield _open
    for session in sessions:
        session.close()


def history(db, request_id, field):
    db.expire_all()
    return db.query(RequestHistory).filter_by(request_id=request_id, field=field).all()


def test_assignment_loses_to_a_concurrent_assignment(db, other_session, make_user, make_request):
    admin = make_user(Role.ADMIN)
    t1 = make_user(Role.TECHNICIAN)
    t2 = make_user(Role.TECHNICIAN)
    request_id = make_request(make_user()).id
    performer, t1_id, t2_id = as_performer(admin), t1.id, t2.id

    def other_admin_assigns_t2():
        engine = WorkflowEngine(other_session(), clock=FixedClock(), auto_advance_on_assign=False)
        assert engine.assign_technician(request_id, t2_id, performer) is True

    engine = WorkflowEngine(
        db, clock=RacingClock(other_admin_assigns_t2), auto_advance_on_assign=False
    )
    assert engine.assign_technician(request_id, t1_id, performer) is False
    assert engine.last_rejection == Rejection.CONFLICT

    assert reload(db, ServiceRequest, request_id).technician_id == t2_id
    assert len(history(db, request_id, "technician_id")) == 1


def test_status_change_loses_to_a_concurrent_change(db, other_session, make_user, make_request):
    tech = make_user(Role.TECHNICIAN)
    admin = make_user(Role.ADMIN)
    request_id = make_request(make_user(), technician=tech).id
    admin_performer, tech_performer = as_performer(admin), as_performer(tech)

    def admin_starts_work():
        engine = WorkflowEngine(other_session(), clock=FixedClock())
        assert engine.change_status(request_id, Status.IN_PROGRESS, admin_performer) is True

    engine = WorkflowEngine(db, clock=RacingClock(admin_starts_work))
    assert engine.change_status(request_id, Status.IN_PROGRESS, tech_performer) is False
    assert engine.last_rejection == Rejection.CONFLICT

    stored = reload(db, ServiceRequest, request_id)
    assert stored.status_id == Status.IN_PROGRESS
    assert stored.version == 2
    assert len(history(db, request_id, "status")) == 1


def test_lock_errors_surface_as_conflict(db, make_user):
    user = make_user()

    with pytest.raises(ConflictError):
        with unit_of_work(db):
            db.get(User, user.id).first_name = "Changed"
            raise OperationalError("UPDATE users", {}, Exception("deadlock detected"))

    assert reload(db, User, user.id).first_name != "Changed"


def test_other_errors_roll_back_and_propagate(db, make_user):
    user = make_user()

    with pytest.raises(KeyError):
        with unit_of_work(db):
            db.get(User, user.id).first_name = "Changed"
            raise KeyError("boom")

    assert reload(db, User, user.id).first_name != "Changed"
