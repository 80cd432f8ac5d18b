# servicedesk/backend/app/services/workflow.py
"""
Request workflow: status state machine, technician assignment and partial
updates.

Statuses only move one step forward:

    Open -> InProgress -> Resolved -> Closed

Open -> InProgress needs a technician already on the request. Closed is
terminal. Who may take each step is in TRANSITIONS.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, FrozenSet, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from .. import config
from ..db import unit_of_work
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..models.enums import Priority, Role, Status
from ..models.request_history import RequestHistory
from ..models.service_request import ServiceRequest
from ..models.user import User
from ..schemas.common import PagedResult, Performer, clamp_paging, is_ascending
from ..schemas.request import (
    RequestCreate,
    RequestDetails,
    RequestListItem,
    RequestQuery,
    RequestUpdate,
)
from ..timeutil import as_utc, utcnow
from .directory import UserDirectory
from .request_store import RequestStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRule:
    roles: FrozenSet[Role]
    requires_technician: bool = False


TRANSITIONS = {
    (Status.OPEN, Status.IN_PROGRESS): TransitionRule(
        roles=frozenset({Role.ADMIN, Role.TECHNICIAN}), requires_technician=True
    ),
    (Status.IN_PROGRESS, Status.RESOLVED): TransitionRule(
        roles=frozenset({Role.ADMIN, Role.TECHNICIAN})
    ),
    (Status.RESOLVED, Status.CLOSED): TransitionRule(roles=frozenset({Role.ADMIN})),
}


def transition_allowed(
    current: Status, target: Status, role: Role, has_technician: bool
) -> bool:
    rule = TRANSITIONS.get((current, target))
    if rule is None:
        return False
    if role not in rule.roles:
        return False
    if rule.requires_technician and not has_technician:
        return False
    return True


class Rejection(enum.Enum):
    """Why change_status or assign_technician answered False."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


class UpdateOutcome(enum.Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    NOT_PERMITTED = "not_permitted"


def _history_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return str(value)


def _ensure_future(due_date: datetime, now: datetime) -> datetime:
    due = as_utc(due_date)
    if due <= now:
        raise ValidationError("DueDate must be in the future")
    return due


class WorkflowEngine:
    def __init__(
        self,
        db: Session,
        store: Optional[RequestStore] = None,
        directory: Optional[UserDirectory] = None,
        clock: Callable[[], datetime] = utcnow,
        auto_advance_on_assign: Optional[bool] = None,
    ):
        self.db = db
        self.store = store or RequestStore(db)
        self.directory = directory or UserDirectory(db)
        self.clock = clock
        if auto_advance_on_assign is None:
            auto_advance_on_assign = config.ASSIGN_AUTO_ADVANCE
        self.auto_advance_on_assign = auto_advance_on_assign
        self.last_rejection: Optional[Rejection] = None

    def _record(self, request: ServiceRequest, field: str, old, new, performer_id: int):
        self.db.add(
            RequestHistory(
                request_id=request.id,
                field=field,
                old_value=_history_value(old),
                new_value=_history_value(new),
                changed_by=performer_id,
                changed_at=self.clock(),
            )
        )

    def _reject(
        self, operation: str, request_id: int, reason: str, kind: Rejection = Rejection.CONFLICT
    ) -> bool:
        self.last_rejection = kind
        logger.info("%s rejected for request %s: %s", operation, request_id, reason)
        # Release any row lock taken while checking
        self.db.rollback()
        return False

    # Queries

    def get_request(self, request_id: int) -> RequestDetails:
        request = self.store.get(request_id)
        if request is None:
            raise NotFoundError(f"Request {request_id} not found")
        return self._details(request)

    def list_requests(self, query: RequestQuery) -> PagedResult[RequestListItem]:
        page, page_size = clamp_paging(
            query.page,
            query.page_size,
            config.REQUEST_PAGE_SIZE_DEFAULT,
            config.REQUEST_PAGE_SIZE_MAX,
        )
        items, total = self.store.query(
            status_id=query.status_id,
            technician_id=query.technician_id,
            created_by_id=query.created_by_id,
            search=query.search,
            created_from=as_utc(query.created_from),
            created_to=as_utc(query.created_to),
            include_closed=query.include_closed,
            sort_by=query.sort_by,
            ascending=is_ascending(query.sort_dir),
            skip=(page - 1) * page_size,
            take=page_size,
        )
        names = self.directory.names(r.technician_id for r in items)
        data = [
            RequestListItem(
                id=r.id,
                title=r.title,
                status_name=r.status.label,
                priority=r.priority_level.label,
                created_at=as_utc(r.created_at),
                technician_name=names.get(r.technician_id),
            )
            for r in items
        ]
        return PagedResult[RequestListItem](
            data=data, total=total, page=page, page_size=page_size
        )

    def _details(self, request: ServiceRequest) -> RequestDetails:
        names = self.directory.names([request.created_by_id, request.technician_id])
        return RequestDetails(
            id=request.id,
            title=request.title,
            description=request.description,
            status_id=request.status_id,
            status_name=request.status.label,
            priority=request.priority_level.label,
            created_at=as_utc(request.created_at),
            updated_at=as_utc(request.updated_at),
            due_date=as_utc(request.due_date),
            created_by_id=request.created_by_id,
            created_by_name=names.get(request.created_by_id),
            technician_id=request.technician_id,
            technician_name=names.get(request.technician_id),
        )

    # Mutations

    def create_request(self, payload: RequestCreate, performer: Performer) -> RequestDetails:
        if self.directory.get_active(performer.id) is None:
            raise AuthorizationError("Performer is missing or inactive")

        title = payload.title.strip()
        description = payload.description.strip()
        if not title or not description:
            raise ValidationError("Title and description are required")

        priority = Priority.NORMAL
        if payload.priority is not None and payload.priority.strip():
            priority = Priority.parse(payload.priority)

        due_date = None
        if payload.due_date is not None:
            due_date = _ensure_future(payload.due_date, self.clock())

        with unit_of_work(self.db):
            request = self.store.add(
                ServiceRequest(
                    title=title,
                    description=description,
                    priority=int(priority),
                    status_id=int(Status.OPEN),
                    created_by_id=performer.id,
                    technician_id=None,
                    created_at=self.clock(),
                    due_date=due_date,
                )
            )
        logger.info("Request %s created by user %s", request.id, performer.id)
        return self._details(request)

    def change_status(self, request_id: int, target_status, performer: Performer) -> bool:
        op = "Status change"
        self.last_rejection = None
        actor = self.directory.get_active(performer.id)
        if actor is None:
            return self._reject(op, request_id, "performer missing or inactive", Rejection.FORBIDDEN)

        target = Status.from_value(target_status)
        if target is None:
            return self._reject(op, request_id, f"unknown status {target_status!r}")

        request = self.store.get(request_id, lock=True)
        if request is None:
            return self._reject(op, request_id, "not found", Rejection.NOT_FOUND)
        if request.is_closed:
            return self._reject(op, request_id, "request is closed")

        current = request.status
        rule = TRANSITIONS.get((current, target))
        if rule is not None and actor.role not in rule.roles:
            return self._reject(
                op,
                request_id,
                f"{current.label} -> {target.label} not allowed for {actor.role.value}",
                Rejection.FORBIDDEN,
            )
        if not transition_allowed(current, target, actor.role, request.technician_id is not None):
            return self._reject(op, request_id, f"{current.label} -> {target.label} not allowed")

        request.status_id = int(target)
        request.updated_at = self.clock()
        self._record(request, "status", current.label, target.label, actor.id)
        try:
            self.db.commit()
        except (StaleDataError, OperationalError):
            self.db.rollback()
            self.last_rejection = Rejection.CONFLICT
            logger.info("%s lost a concurrent update on request %s", op, request_id)
            return False
        logger.info(
            "Request %s moved %s -> %s by user %s", request_id, current.label, target.label, actor.id
        )
        return True

    def assign_technician(self, request_id: int, technician_id: int, performer: Performer) -> bool:
        op = "Assignment"
        self.last_rejection = None
        request = self.store.get(request_id, lock=True)
        if request is None:
            return self._reject(op, request_id, "not found", Rejection.NOT_FOUND)
        if request.is_closed:
            return self._reject(op, request_id, "request is closed")
        if request.technician_id is not None:
            return self._reject(op, request_id, "technician already assigned")

        technician = self.directory.get_active(technician_id)
        if technician is None or technician.role != Role.TECHNICIAN:
            return self._reject(op, request_id, f"user {technician_id} is not an active technician")

        actor = self.directory.get_active(performer.id)
        if actor is None or actor.role != Role.ADMIN:
            return self._reject(op, request_id, "performer is not an active admin", Rejection.FORBIDDEN)

        now = self.clock()
        request.technician_id = technician.id
        self._record(request, "technician_id", None, technician.id, actor.id)
        if self.auto_advance_on_assign and request.status_id == Status.OPEN:
            request.status_id = int(Status.IN_PROGRESS)
            self._record(request, "status", Status.OPEN.label, Status.IN_PROGRESS.label, actor.id)
        request.updated_at = now
        try:
            self.db.commit()
        except (StaleDataError, OperationalError):
            self.db.rollback()
            self.last_rejection = Rejection.CONFLICT
            logger.info("%s lost a concurrent update on request %s", op, request_id)
            return False
        logger.info("Technician %s assigned to request %s by user %s", technician.id, request_id, actor.id)
        return True

    def update_request(
        self, request_id: int, fields: RequestUpdate, performer: Performer
    ) -> UpdateOutcome:
        request = self.store.get(request_id, lock=True)
        if request is None:
            self.db.rollback()
            return UpdateOutcome.NOT_FOUND

        actor: Optional[User] = self.directory.get_active(performer.id)
        if (
            request.is_closed
            or actor is None
            or not (actor.role == Role.ADMIN or request.created_by_id == actor.id)
        ):
            self._reject("Update", request_id, "not permitted", Rejection.FORBIDDEN)
            return UpdateOutcome.NOT_PERMITTED

        changes = {}
        try:
            if fields.title is not None:
                title = fields.title.strip()
                if not title or len(title) > 200:
                    raise ValidationError("Title must be 1 to 200 characters")
                changes["title"] = title
            if fields.description is not None:
                description = fields.description.strip()
                if not description:
                    raise ValidationError("Description cannot be empty")
                changes["description"] = description
            if fields.priority is not None:
                changes["priority"] = int(Priority.parse(fields.priority))
            if fields.due_date is not None:
                changes["due_date"] = _ensure_future(fields.due_date, self.clock())
        except ValidationError:
            self.db.rollback()
            raise

        applied = False
        with unit_of_work(self.db):
            for field, new_value in changes.items():
                old_value = getattr(request, field)
                if field == "due_date":
                    old_value = as_utc(old_value)
                if old_value == new_value:
                    continue
                setattr(request, field, new_value)
                self._record(request, field, old_value, new_value, actor.id)
                applied = True
            if applied:
                request.updated_at = self.clock()

        if not applied:
            return UpdateOutcome.UNCHANGED
        logger.info("Request %s updated by user %s", request_id, actor.id)
        return UpdateOutcome.UPDATED
