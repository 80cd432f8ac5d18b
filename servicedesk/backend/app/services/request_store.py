# servicedesk/backend/app/services/request_store.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..models.enums import Status
from ..models.service_request import ServiceRequest

# Recognised sort fields (lower-case); anything else sorts by created_at
_SORT_COLUMNS = {
    "createdat": ServiceRequest.created_at,
    "priority": ServiceRequest.priority,
    "title": ServiceRequest.title,
}


class RequestStore:
    """Persistence for service requests."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, request: ServiceRequest) -> ServiceRequest:
        self.db.add(request)
        self.db.flush()
        return request

    def get(self, request_id: int, lock: bool = False) -> Optional[ServiceRequest]:
        stmt = select(ServiceRequest).where(ServiceRequest.id == request_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.db.scalars(stmt).first()

    def query(
        self,
        status_id: Optional[int] = None,
        technician_id: Optional[int] = None,
        created_by_id: Optional[int] = None,
        search: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        include_closed: bool = True,
        sort_by: Optional[str] = None,
        ascending: bool = False,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> Tuple[List[ServiceRequest], int]:
        """Filtered, sorted page of requests plus the total matching count."""
        conditions = []
        if status_id is not None:
            conditions.append(ServiceRequest.status_id == status_id)
        if technician_id is not None:
            conditions.append(ServiceRequest.technician_id == technician_id)
        if created_by_id is not None:
            conditions.append(ServiceRequest.created_by_id == created_by_id)
        if search and search.strip():
            term = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(ServiceRequest.title).like(term),
                    func.lower(ServiceRequest.description).like(term),
                )
            )
        if created_from is not None:
            conditions.append(ServiceRequest.created_at >= created_from)
        if created_to is not None:
            conditions.append(ServiceRequest.created_at < created_to)
        if not include_closed:
            conditions.append(ServiceRequest.status_id != Status.CLOSED)

        total = self.db.scalar(
            select(func.count(ServiceRequest.id)).where(*conditions)
        ) or 0

        column = _SORT_COLUMNS.get((sort_by or "").strip().lower(), ServiceRequest.created_at)
        order = column.asc() if ascending else column.desc()
        tiebreak = ServiceRequest.id.asc() if ascending else ServiceRequest.id.desc()

        stmt = select(ServiceRequest).where(*conditions).order_by(order, tiebreak).offset(skip)
        if take is not None:
            stmt = stmt.limit(take)
        return list(self.db.scalars(stmt)), total
