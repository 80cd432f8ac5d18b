# servicedesk/backend/app/api/deps.py

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.enums import Role
from ..schemas.common import Performer
from ..services.directory import UserDirectory


def get_performer(
    x_user_id: int = Header(..., alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Performer:
    """
    Resolve the caller's identity. The token layer in front of this service
    puts the authenticated user id in X-User-Id. Deactivated accounts are
    refused here the same way the token layer refuses them at login.
    """
    user = UserDirectory(db).get(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is deactivated")
    return Performer(id=user.id, role=user.role)


def require_roles(*roles: Role):
    def dependency(performer: Performer = Depends(get_performer)) -> Performer:
        if performer.role not in roles:
            raise HTTPException(status_code=403, detail="Not allowed for this role")
        return performer

    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.ADMIN, Role.TECHNICIAN)
