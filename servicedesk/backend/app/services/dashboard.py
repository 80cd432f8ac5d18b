# servicedesk/backend/app/services/dashboard.py
"""
Dashboard figures derived from the request table. Read-only.

Most figures are scoped by the caller's role:
  - User       -> requests they created
  - Technician -> requests assigned to them
  - Admin      -> everything
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import config
from ..models.enums import Priority, Role, Status
from ..models.service_request import ServiceRequest
from ..schemas.common import Performer
from ..schemas.dashboard import (
    ActivityItem,
    DashboardSummaryWithTrends,
    HighPriorityTicket,
    PriorityBreakdown,
    StatusCounts,
)
from ..timeutil import as_utc, day_bounds, relative_time_label, utcnow
from .directory import UserDirectory

_STATUS_FIELDS = {
    Status.OPEN: "open",
    Status.IN_PROGRESS: "in_progress",
    Status.RESOLVED: "resolved",
    Status.CLOSED: "closed",
}


def scope_conditions(performer: Performer) -> list:
    if performer.role == Role.USER:
        return [ServiceRequest.created_by_id == performer.id]
    if performer.role == Role.TECHNICIAN:
        return [ServiceRequest.technician_id == performer.id]
    return []


def activity_message(request: ServiceRequest, names: Dict[int, str]) -> str:
    status = request.status
    if status == Status.OPEN:
        creator = names.get(request.created_by_id, "Unknown")
        return f"New ticket #{request.id} created by {creator}"
    if status == Status.IN_PROGRESS:
        technician = names.get(request.technician_id, "Unassigned")
        return f"Ticket #{request.id} assigned to {technician}"
    if status == Status.RESOLVED:
        return f"Ticket #{request.id} resolved"
    return f"Ticket #{request.id} closed"


class DashboardService:
    def __init__(
        self,
        db: Session,
        directory: Optional[UserDirectory] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.directory = directory or UserDirectory(db)
        self.clock = clock

    def _count_by_status(self, conditions: list) -> StatusCounts:
        rows = self.db.execute(
            select(ServiceRequest.status_id, func.count(ServiceRequest.id))
            .where(*conditions)
            .group_by(ServiceRequest.status_id)
        )
        counts = StatusCounts()
        for status_id, total in rows:
            status = Status.from_value(status_id)
            if status is not None:
                setattr(counts, _STATUS_FIELDS[status], int(total))
        return counts

    def _created_on(self, days_back: int, extra: list) -> StatusCounts:
        start, end = day_bounds(self.clock(), days_back)
        return self._count_by_status(
            extra + [ServiceRequest.created_at >= start, ServiceRequest.created_at < end]
        )

    def summary(self, performer: Performer) -> StatusCounts:
        return self._count_by_status(scope_conditions(performer))

    def trends(self, performer: Performer) -> StatusCounts:
        """Per status: created today minus created yesterday, by creation date."""
        scope = scope_conditions(performer)
        today = self._created_on(0, scope)
        yesterday = self._created_on(1, scope)
        return StatusCounts(
            **{
                field: getattr(today, field) - getattr(yesterday, field)
                for field in _STATUS_FIELDS.values()
            }
        )

    def summary_with_trends(self, performer: Performer) -> DashboardSummaryWithTrends:
        summary = self.summary(performer)
        return DashboardSummaryWithTrends(**summary.model_dump(), trends=self.trends(performer))

    def priority_breakdown(self) -> PriorityBreakdown:
        rows = self.db.execute(
            select(ServiceRequest.priority, func.count(ServiceRequest.id)).group_by(
                ServiceRequest.priority
            )
        )
        breakdown = PriorityBreakdown()
        for priority, total in rows:
            setattr(breakdown, Priority(priority).label.lower(), int(total))
        return breakdown

    def resolved_today(self, performer: Performer) -> int:
        start, end = day_bounds(self.clock())
        stmt = select(func.count(ServiceRequest.id)).where(
            ServiceRequest.status_id == Status.RESOLVED,
            ServiceRequest.updated_at >= start,
            ServiceRequest.updated_at < end,
            *scope_conditions(performer),
        )
        return self.db.scalar(stmt) or 0

    def created_today(self) -> int:
        start, end = day_bounds(self.clock())
        stmt = select(func.count(ServiceRequest.id)).where(
            ServiceRequest.created_at >= start, ServiceRequest.created_at < end
        )
        return self.db.scalar(stmt) or 0

    def recent_activity(self, performer: Performer) -> List[ActivityItem]:
        stmt = (
            select(ServiceRequest)
            .where(*scope_conditions(performer))
            .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
            .limit(config.RECENT_ACTIVITY_LIMIT)
        )
        requests = list(self.db.scalars(stmt))
        names = self.directory.names(
            [r.created_by_id for r in requests] + [r.technician_id for r in requests]
        )
        now = self.clock()
        return [
            ActivityItem(
                request_id=r.id,
                status_name=r.status.label,
                message=activity_message(r, names),
                time=relative_time_label(r.created_at, now),
                created_at=as_utc(r.created_at),
            )
            for r in requests
        ]

    def high_priority_tickets(self) -> List[HighPriorityTicket]:
        stmt = (
            select(ServiceRequest)
            .where(
                ServiceRequest.priority == Priority.HIGH,
                ServiceRequest.status_id != Status.CLOSED,
            )
            .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
            .limit(config.HIGH_PRIORITY_LIMIT)
        )
        requests = list(self.db.scalars(stmt))
        names = self.directory.names(r.technician_id for r in requests)
        now = self.clock()
        return [
            HighPriorityTicket(
                id=r.id,
                title=r.title,
                status_name=r.status.label,
                assignee=names.get(r.technician_id, "Unassigned"),
                time=relative_time_label(r.created_at, now),
                created_at=as_utc(r.created_at),
            )
            for r in requests
        ]
