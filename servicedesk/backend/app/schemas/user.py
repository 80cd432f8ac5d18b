# servicedesk/backend/app/schemas/user.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.enums import Role


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    role: Optional[str] = "User"


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class RoleAssignment(BaseModel):
    role: str


class UserQuery(BaseModel):
    page: int = 1
    page_size: int = 20
    search: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    sort_by: Optional[str] = "CreatedAt"
    sort_dir: Optional[str] = "desc"


class UserRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserListItem(UserRead):
    created_at: datetime


class TechnicianItem(BaseModel):
    id: int
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)
