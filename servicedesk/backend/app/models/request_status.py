# servicedesk/backend/app/models/request_status.py
from sqlalchemy import Column, Integer, String

from ..db import Base


class RequestStatus(Base):
    """Lookup table for the fixed status vocabulary (see enums.Status)."""

    __tablename__ = "request_statuses"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), unique=True, nullable=False)
    order = Column(Integer, nullable=False)
