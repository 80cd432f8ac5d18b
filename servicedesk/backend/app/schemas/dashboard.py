# servicedesk/backend/app/schemas/dashboard.py

from datetime import datetime

from pydantic import BaseModel


class StatusCounts(BaseModel):
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class DashboardSummaryWithTrends(StatusCounts):
    trends: StatusCounts


class PriorityBreakdown(BaseModel):
    low: int = 0
    normal: int = 0
    high: int = 0


class ActivityItem(BaseModel):
    request_id: int
    status_name: str
    message: str
    time: str
    created_at: datetime


class HighPriorityTicket(BaseModel):
    id: int
    title: str
    status_name: str
    assignee: str
    time: str
    created_at: datetime
