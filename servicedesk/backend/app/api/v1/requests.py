# servicedesk/backend/app/api/v1/requests.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...db import get_db
from ...schemas.common import PagedResult, Performer
from ...schemas.dashboard import (
    ActivityItem,
    DashboardSummaryWithTrends,
    HighPriorityTicket,
    PriorityBreakdown,
    StatusCounts,
)
from ...schemas.request import (
    AssignTechnicianPayload,
    ChangeStatusPayload,
    RequestCreate,
    RequestDetails,
    RequestListItem,
    RequestQuery,
    RequestUpdate,
)
from ...services.dashboard import DashboardService
from ...services.workflow import Rejection, UpdateOutcome, WorkflowEngine
from ..deps import get_performer, require_staff

router = APIRouter(prefix="/api/requests", tags=["requests"])

_REJECTION_CODES = {
    Rejection.NOT_FOUND: 404,
    Rejection.FORBIDDEN: 403,
    Rejection.CONFLICT: 409,
}


def _rejected(engine: WorkflowEngine, detail: str) -> HTTPException:
    code = _REJECTION_CODES.get(engine.last_rejection, 409)
    return HTTPException(status_code=code, detail=detail)


# Dashboard (static paths first so they are not read as an id)

@router.get("/summary", response_model=StatusCounts)
def get_summary(performer: Performer = Depends(get_performer), db: Session = Depends(get_db)):
    return DashboardService(db).summary(performer)


@router.get("/summary-with-trends", response_model=DashboardSummaryWithTrends)
def get_summary_with_trends(
    performer: Performer = Depends(get_performer), db: Session = Depends(get_db)
):
    return DashboardService(db).summary_with_trends(performer)


@router.get("/recent-activity", response_model=List[ActivityItem])
def get_recent_activity(
    performer: Performer = Depends(get_performer), db: Session = Depends(get_db)
):
    return DashboardService(db).recent_activity(performer)


@router.get("/high-priority", response_model=List[HighPriorityTicket])
def get_high_priority(_: Performer = Depends(require_staff), db: Session = Depends(get_db)):
    return DashboardService(db).high_priority_tickets()


@router.get("/priority-breakdown", response_model=PriorityBreakdown)
def get_priority_breakdown(_: Performer = Depends(require_staff), db: Session = Depends(get_db)):
    return DashboardService(db).priority_breakdown()


@router.get("/resolved-today")
def get_resolved_today(performer: Performer = Depends(require_staff), db: Session = Depends(get_db)):
    return {"resolved_today": DashboardService(db).resolved_today(performer)}


@router.get("/created-today")
def get_created_today(_: Performer = Depends(require_staff), db: Session = Depends(get_db)):
    return {"created_today": DashboardService(db).created_today()}


# Requests

@router.get("", response_model=PagedResult[RequestListItem])
def list_requests(
    query: RequestQuery = Depends(),
    _: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    return WorkflowEngine(db).list_requests(query)


@router.post("", response_model=RequestDetails, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: RequestCreate,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    return WorkflowEngine(db).create_request(payload, performer)


@router.get("/{request_id}", response_model=RequestDetails)
def get_request(
    request_id: int,
    _: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    return WorkflowEngine(db).get_request(request_id)


@router.put("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_request(
    request_id: int,
    payload: RequestUpdate,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    outcome = WorkflowEngine(db).update_request(request_id, payload, performer)
    if outcome == UpdateOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Request not found")
    if outcome == UpdateOutcome.NOT_PERMITTED:
        raise HTTPException(status_code=403, detail="Update not allowed")
    # UPDATED and UNCHANGED both answer 204


@router.post("/{request_id}/assign-technician")
def assign_technician(
    request_id: int,
    payload: AssignTechnicianPayload,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    engine = WorkflowEngine(db)
    if not engine.assign_technician(request_id, payload.technician_id, performer):
        raise _rejected(engine, "Cannot assign technician")
    return {"message": "Technician assigned"}


@router.post("/{request_id}/change-status")
def change_status(
    request_id: int,
    payload: ChangeStatusPayload,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    engine = WorkflowEngine(db)
    if not engine.change_status(request_id, payload.status_id, performer):
        raise _rejected(engine, "Cannot change status")
    return {"message": "Status changed"}
