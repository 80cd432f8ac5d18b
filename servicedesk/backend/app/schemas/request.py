# servicedesk/backend/app/schemas/request.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    # Low / Normal / High, case-insensitive; None means Normal
    priority: Optional[str] = None
    due_date: Optional[datetime] = None


class RequestUpdate(BaseModel):
    """Every field is optional; absent fields are left alone."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None


class AssignTechnicianPayload(BaseModel):
    technician_id: int


class ChangeStatusPayload(BaseModel):
    status_id: int


class RequestQuery(BaseModel):
    page: int = 1
    page_size: int = 10
    status_id: Optional[int] = None
    technician_id: Optional[int] = None
    created_by_id: Optional[int] = None
    search: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    include_closed: bool = True
    sort_by: Optional[str] = "CreatedAt"
    sort_dir: Optional[str] = "desc"


class RequestListItem(BaseModel):
    id: int
    title: str
    status_name: str
    priority: str
    created_at: datetime
    technician_name: Optional[str] = None


class RequestDetails(BaseModel):
    id: int
    title: str
    description: str
    status_id: int
    status_name: str
    priority: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    created_by_id: int
    created_by_name: Optional[str] = None
    technician_id: Optional[int] = None
    technician_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
