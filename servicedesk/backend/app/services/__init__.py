# servicedesk/backend/app/services/__init__.py

from .admin_guard import can_remove_admin_privilege, ensure_admin_remains
from .dashboard import DashboardService
from .directory import UserDirectory
from .request_store import RequestStore
from .users import UserService
from .workflow import TRANSITIONS, UpdateOutcome, WorkflowEngine, transition_allowed

__all__ = [
    "can_remove_admin_privilege",
    "ensure_admin_remains",
    "DashboardService",
    "UserDirectory",
    "RequestStore",
    "UserService",
    "TRANSITIONS",
    "UpdateOutcome",
    "WorkflowEngine",
    "transition_allowed",
]
