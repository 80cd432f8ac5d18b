# servicedesk/backend/app/db.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from .config import DATABASE_URL
from .errors import ConflictError

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=False, future=True, connect_args=_connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

Base = declarative_base()


def get_db():
    """FastAPI dependency to provide DB session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Commit everything done inside the block, or roll it back.
    Store-level integrity, stale-version and lock (deadlock, lock timeout)
    errors surface as ConflictError.
    """
    try:
        yield db
        db.commit()
    except (IntegrityError, OperationalError, StaleDataError) as exc:
        db.rollback()
        raise ConflictError("The record was changed or conflicts with existing data") from exc
    except Exception:
        db.rollback()
        raise
