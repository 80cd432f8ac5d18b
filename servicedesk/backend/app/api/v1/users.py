# servicedesk/backend/app/api/v1/users.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...db import get_db
from ...schemas.common import PagedResult, Performer
from ...schemas.user import (
    RoleAssignment,
    TechnicianItem,
    UserCreate,
    UserListItem,
    UserQuery,
    UserRead,
    UserUpdate,
)
from ...services.users import UserService
from ..deps import get_performer, require_admin

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/current", response_model=UserRead)
def get_current(performer: Performer = Depends(get_performer), db: Session = Depends(get_db)):
    return UserService(db).get_current(performer)


@router.get("/all", response_model=List[UserRead])
def get_all(_: Performer = Depends(require_admin), db: Session = Depends(get_db)):
    return UserService(db).get_all()


@router.get("/technicians", response_model=List[TechnicianItem])
def get_technicians(_: Performer = Depends(require_admin), db: Session = Depends(get_db)):
    return UserService(db).get_technicians()


@router.get("", response_model=PagedResult[UserListItem])
def list_users(
    query: UserQuery = Depends(),
    _: Performer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).list_users(query)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    performer: Performer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user_id = UserService(db).create_user(payload, performer)
    return {"id": user_id, "message": "User created"}


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, _: Performer = Depends(require_admin), db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    return UserService(db).update_user(user_id, payload, performer)


@router.put("/{user_id}/role")
def assign_role(
    user_id: int,
    payload: RoleAssignment,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    UserService(db).assign_role(user_id, payload.role, performer)
    return {"message": "Role updated"}


@router.post("/{user_id}/deactivate")
def deactivate_user(
    user_id: int,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    UserService(db).deactivate(user_id, performer)
    return {"message": "User deactivated"}


@router.post("/{user_id}/activate")
def activate_user(
    user_id: int,
    performer: Performer = Depends(get_performer),
    db: Session = Depends(get_db),
):
    UserService(db).activate(user_id, performer)
    return {"message": "User activated"}
