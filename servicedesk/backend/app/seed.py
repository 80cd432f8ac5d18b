# servicedesk/backend/app/seed.py
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .auth import get_password_hash
from .models.enums import Role, Status
from .models.request_status import RequestStatus
from .models.user import User

logger = logging.getLogger(__name__)


def seed_statuses(db: Session) -> None:
    """Insert the four canonical statuses if they are missing."""
    existing = set(db.scalars(select(RequestStatus.id)))
    for status in Status:
        if status.value not in existing:
            db.add(RequestStatus(id=status.value, name=status.label, order=status.value))
    db.commit()


def seed_admin(db: Session, email: str, password: str) -> None:
    """Create a first admin when there is no admin at all."""
    if db.scalar(select(User.id).where(User.role == Role.ADMIN).limit(1)) is not None:
        return
    db.add(
        User(
            first_name="System",
            last_name="Admin",
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            role=Role.ADMIN,
            is_active=True,
        )
    )
    db.commit()
    logger.info("Seeded initial admin %s", email)
