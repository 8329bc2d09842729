"""Pydantic schemas for registration, login and the current user."""

import uuid
from typing import Optional

from pydantic import EmailStr, Field

from datagov.schemas.common import ApiModel


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = None
    workspace_name: Optional[str] = Field(None, min_length=1, max_length=255)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class UserRead(ApiModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None


class UserResponse(ApiModel):
    user: UserRead
