"""Profile and user-management API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    BASIC = "basic"
    ADMIN = "admin"


class Profile(BaseModel):
    id: str
    email: str
    role: Role
    is_banned: bool
    created_at: datetime
    updated_at: datetime


class CreateUserRequest(BaseModel):
    # Blank values are rejected by the service after authorization.
    email: str | None = None
    password: str | None = None
    role: Role | None = None


class CreatedUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    created: bool = True
    message: str = "User created successfully"


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")
    role: Role | None = None
    is_banned: bool | None = None
