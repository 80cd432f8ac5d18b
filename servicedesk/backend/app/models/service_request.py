# servicedesk/backend/app/models/service_request.py

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from ..db import Base
from ..timeutil import utcnow
from .enums import Priority, Status


class ServiceRequest(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(Integer, nullable=False, default=int(Priority.NORMAL))

    status_id = Column(
        Integer,
        ForeignKey("request_statuses.id"),
        nullable=False,
        default=int(Status.OPEN),
        index=True,
    )
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    technician_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    # Only set by a successful workflow mutation
    updated_at = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def status(self) -> Status:
        return Status(self.status_id)

    @property
    def priority_level(self) -> Priority:
        return Priority(self.priority)

    @property
    def is_closed(self) -> bool:
        return self.status_id == Status.CLOSED
