# servicedesk/backend/app/models/__init__.py

from .enums import Priority, Role, Status
from .user import User
from .request_status import RequestStatus
from .service_request import ServiceRequest
from .request_history import RequestHistory

__all__ = [
    "Priority",
    "Role",
    "Status",
    "User",
    "RequestStatus",
    "ServiceRequest",
    "RequestHistory",
]
