# servicedesk/backend/app/services/admin_guard.py
"""
Last-admin protection.

At least one active Admin must exist after any change to a user's role or
active flag. User management calls ensure_admin_remains() before demoting or
deactivating an Admin. The guard only reads; the caller does the write.
"""
import logging

from ..errors import ConflictError
from ..models.enums import Role
from .directory import UserDirectory

logger = logging.getLogger(__name__)


def can_remove_admin_privilege(directory: UserDirectory, target_user_id: int) -> bool:
    """True when some other active Admin would remain."""
    # Lock the whole active-admin set, target included, so concurrent
    # demotions queue on the same rows in the same order.
    admins = directory.locked_ids(Role.ADMIN, active=True)
    return any(admin_id != target_user_id for admin_id in admins)


def ensure_admin_remains(directory: UserDirectory, target_user_id: int, action: str) -> None:
    if not can_remove_admin_privilege(directory, target_user_id):
        logger.warning("Refused to %s user %s: last active admin", action, target_user_id)
        raise ConflictError(f"Cannot {action} the last active admin")
