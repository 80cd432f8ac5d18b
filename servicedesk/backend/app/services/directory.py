# servicedesk/backend/app/services/directory.py
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.enums import Role
from ..models.user import User


class UserDirectory:
    """Read-only lookups over users: identity, role and active flag."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        return self.db.get(User, user_id)

    def get_active(self, user_id: Optional[int]) -> Optional[User]:
        user = self.get(user_id)
        if user is None or not user.is_active:
            return None
        return user

    def list(self, role: Optional[Role] = None, active: Optional[bool] = None) -> List[User]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if active is not None:
            stmt = stmt.where(User.is_active == active)
        return list(self.db.scalars(stmt.order_by(User.id)))

    def count(
        self,
        role: Optional[Role] = None,
        active: Optional[bool] = None,
        exclude_id: Optional[int] = None,
    ) -> int:
        stmt = select(func.count(User.id))
        if role is not None:
            stmt = stmt.where(User.role == role)
        if active is not None:
            stmt = stmt.where(User.is_active == active)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.scalar(stmt) or 0

    def locked_ids(self, role: Role, active: bool = True) -> List[int]:
        """Ids of matching users, read with FOR UPDATE in id order so a count-then-act holds."""
        stmt = (
            select(User.id)
            .where(User.role == role, User.is_active == active)
            .order_by(User.id)
            .with_for_update()
        )
        return list(self.db.scalars(stmt))

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.scalar(stmt.limit(1)) is not None

    def names(self, user_ids: Iterable[Optional[int]]) -> Dict[int, str]:
        ids = {uid for uid in user_ids if uid is not None}
        if not ids:
            return {}
        users = self.db.scalars(select(User).where(User.id.in_(ids)))
        return {user.id: user.full_name for user in users}
