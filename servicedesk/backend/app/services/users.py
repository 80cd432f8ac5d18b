# servicedesk/backend/app/services/users.py
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import or_, select, func
from sqlalchemy.orm import Session

from .. import config
from ..auth import get_password_hash
from ..db import unit_of_work
from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models.enums import Role
from ..models.user import User
from ..schemas.common import PagedResult, Performer, clamp_paging, is_ascending
from ..schemas.user import (
    TechnicianItem,
    UserCreate,
    UserListItem,
    UserQuery,
    UserRead,
    UserUpdate,
)
from ..timeutil import as_utc, utcnow
from .admin_guard import ensure_admin_remains
from .directory import UserDirectory

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "firstname": User.first_name,
    "lastname": User.last_name,
    "email": User.email,
    "createdat": User.created_at,
}


def capitalize_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return value
    return value[0].upper() + value[1:].lower()


def normalize_email(value: str) -> str:
    return value.strip().lower()


class UserService:
    def __init__(
        self,
        db: Session,
        directory: Optional[UserDirectory] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.directory = directory or UserDirectory(db)
        self.clock = clock

    def _require_admin(self, performer: Performer) -> User:
        actor = self.directory.get_active(performer.id)
        if actor is None or actor.role != Role.ADMIN:
            raise AuthorizationError("Only an active admin may do this")
        return actor

    def _target(self, user_id: int) -> User:
        user = self.directory.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    # Queries

    def get_user(self, user_id: int) -> UserRead:
        return UserRead.model_validate(self._target(user_id))

    def get_current(self, performer: Performer) -> UserRead:
        return self.get_user(performer.id)

    def get_all(self) -> List[UserRead]:
        return [UserRead.model_validate(u) for u in self.directory.list()]

    def get_technicians(self) -> List[TechnicianItem]:
        return [
            TechnicianItem.model_validate(u)
            for u in self.directory.list(role=Role.TECHNICIAN, active=True)
        ]

    def list_users(self, query: UserQuery) -> PagedResult[UserListItem]:
        page, page_size = clamp_paging(
            query.page, query.page_size, config.USER_PAGE_SIZE_DEFAULT, config.USER_PAGE_SIZE_MAX
        )

        conditions = []
        if query.search and query.search.strip():
            term = f"{query.search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(User.first_name).like(term),
                    func.lower(User.last_name).like(term),
                    func.lower(User.email).like(term),
                )
            )
        if query.role and query.role.strip():
            conditions.append(User.role == Role.parse(query.role))
        if query.is_active is not None:
            conditions.append(User.is_active == query.is_active)

        total = self.db.scalar(select(func.count(User.id)).where(*conditions)) or 0

        column = _SORT_COLUMNS.get((query.sort_by or "").strip().lower(), User.created_at)
        ascending = is_ascending(query.sort_dir)
        order = column.asc() if ascending else column.desc()
        stmt = (
            select(User)
            .where(*conditions)
            .order_by(order, User.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        data = [
            UserListItem(
                id=u.id,
                first_name=u.first_name,
                last_name=u.last_name,
                email=u.email,
                role=u.role,
                is_active=u.is_active,
                created_at=as_utc(u.created_at),
            )
            for u in self.db.scalars(stmt)
        ]
        return PagedResult[UserListItem](data=data, total=total, page=page, page_size=page_size)

    # Mutations

    def create_user(self, payload: UserCreate, performer: Performer) -> int:
        self._require_admin(performer)
        email = normalize_email(payload.email)
        first_name = capitalize_name(payload.first_name)
        last_name = capitalize_name(payload.last_name)
        if not first_name or not last_name:
            raise ValidationError("First and last name are required")
        role = Role.parse(payload.role) if payload.role and payload.role.strip() else Role.USER

        if self.directory.email_taken(email):
            raise ConflictError("Email already exists")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=get_password_hash(payload.password),
            role=role,
            is_active=True,
            created_at=self.clock(),
        )
        with unit_of_work(self.db):
            self.db.add(user)
            self.db.flush()
        logger.info("User %s created with role %s", user.id, role.value)
        return user.id

    def update_user(self, user_id: int, payload: UserUpdate, performer: Performer) -> UserRead:
        actor = self.directory.get_active(performer.id)
        if actor is None:
            raise AuthorizationError("Performer is missing or inactive")
        is_admin = actor.role == Role.ADMIN
        if actor.id != user_id and not is_admin:
            raise AuthorizationError("Only admins may update other users")

        user = self._target(user_id)

        with unit_of_work(self.db):
            if payload.email is not None and payload.email.strip():
                email = normalize_email(payload.email)
                if email != user.email:
                    if self.directory.email_taken(email, exclude_id=user.id):
                        raise ConflictError("Email already in use")
                    user.email = email

            if payload.first_name is not None:
                first_name = capitalize_name(payload.first_name)
                if not first_name:
                    raise ValidationError("First name is required")
                user.first_name = first_name

            if payload.last_name is not None:
                last_name = capitalize_name(payload.last_name)
                if not last_name:
                    raise ValidationError("Last name is required")
                user.last_name = last_name

            if payload.is_active is not None and is_admin and payload.is_active != user.is_active:
                if not payload.is_active and user.role == Role.ADMIN:
                    ensure_admin_remains(self.directory, user.id, "deactivate")
                user.is_active = payload.is_active

            user.updated_at = self.clock()

        return UserRead.model_validate(user)

    def assign_role(self, user_id: int, role: str, performer: Performer) -> bool:
        target_role = Role.parse(role)
        self._require_admin(performer)
        user = self._target(user_id)

        if user.role == target_role:
            return True

        with unit_of_work(self.db):
            if user.role == Role.ADMIN and user.is_active:
                ensure_admin_remains(self.directory, user.id, "demote")
            user.role = target_role
            user.updated_at = self.clock()
        logger.info("User %s is now %s (by user %s)", user_id, target_role.value, performer.id)
        return True

    def deactivate(self, user_id: int, performer: Performer) -> bool:
        self._require_admin(performer)
        user = self._target(user_id)
        if not user.is_active:
            return True

        with unit_of_work(self.db):
            if user.role == Role.ADMIN:
                ensure_admin_remains(self.directory, user.id, "deactivate")
            user.is_active = False
            user.updated_at = self.clock()
        logger.info("User %s deactivated by user %s", user_id, performer.id)
        return True

    def activate(self, user_id: int, performer: Performer) -> bool:
        self._require_admin(performer)
        user = self._target(user_id)
        if user.is_active:
            return True

        with unit_of_work(self.db):
            user.is_active = True
            user.updated_at = self.clock()
        logger.info("User %s activated by user %s", user_id, performer.id)
        return True
